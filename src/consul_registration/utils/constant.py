from enum import StrEnum

SEPARATOR = "-"

DEFAULT_APP_NAME = "application"
DEFAULT_MANAGEMENT_SUFFIX = "management"
DEFAULT_HEALTH_CHECK_PATH = "/health"

CONTEXT_PATH_TAG_PREFIX = "contextPath="
SERVICE_CHECK_PREFIX = "service:"

ACL_TOKEN_HEADER = "X-Consul-Token"


class Schemes(StrEnum):
    """Schemes used to synthesize HTTP health check URLs."""
    HTTP = "http"
    HTTPS = "https"
