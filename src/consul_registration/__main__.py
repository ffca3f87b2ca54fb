import sys

from consul_registration.cli import main

if __name__ == "__main__":
    sys.exit(main())
