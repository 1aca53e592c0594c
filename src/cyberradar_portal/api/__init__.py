from cyberradar_portal.api.base import ServiceClient
from cyberradar_portal.api.cosmos import CosmosAlertStore
from cyberradar_portal.api.exceptions import (
    AuthenticationError,
    NotConfiguredError,
    NotFoundError,
    RateLimitError,
    ServiceError,
)
from cyberradar_portal.api.models import SearchPage, SqlQuerySpec
from cyberradar_portal.api.search import AlertSearchClient, severity_filter

__all__ = [
    "ServiceClient",
    "CosmosAlertStore",
    "AlertSearchClient",
    "SearchPage",
    "SqlQuerySpec",
    "severity_filter",
    "ServiceError",
    "RateLimitError",
    "AuthenticationError",
    "NotFoundError",
    "NotConfiguredError",
]
