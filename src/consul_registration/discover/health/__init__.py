from .check_strategy import build_check, build_check_url

__all__ = ["build_check", "build_check_url"]
