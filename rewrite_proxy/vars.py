import os

SERVICE_NAME = os.getenv("SERVICE_NAME", "host-rewrite-proxy")

OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT")
OTLP_HEADERS = os.getenv("OTLP_HEADERS", "")

# Every path is proxied unless metrics are given a path of their own
METRICS_PATH = os.getenv("METRICS_PATH", "").rstrip("/")

DEFAULT_PROXY_TIMEOUT = 300.0
DEFAULT_CLIENT_IP_HEADER = "cf-connecting-ip"
DEFAULT_REGION_HEADER = "cf-ipcountry"

# Environment variables read per request by rewrite_proxy.config
PROXY_ENV_KEYS = (
    "PROXY_HOSTNAME",
    "PROXY_PROTOCOL",
    "PATHNAME_REGEX",
    "UA_WHITELIST_REGEX",
    "UA_BLACKLIST_REGEX",
    "IP_WHITELIST_REGEX",
    "IP_BLACKLIST_REGEX",
    "REGION_WHITELIST_REGEX",
    "REGION_BLACKLIST_REGEX",
    "URL302",
    "DEBUG",
    "HOST_SPLITS",
    "PROXY_TIMEOUT",
    "CLIENT_IP_HEADER",
    "REGION_HEADER",
)
