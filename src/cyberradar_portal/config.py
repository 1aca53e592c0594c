import os
from dataclasses import dataclass

from dotenv import load_dotenv

from cyberradar_portal.api.exceptions import NotConfiguredError

DEFAULT_DATABASE = "cyberradar"
DEFAULT_CONTAINER = "raw_alerts"
DEFAULT_STATUS_CONTAINER = "alert_status"
DEFAULT_ACTIONS_CONTAINER = "alert_actions"
DEFAULT_SEARCH_INDEX = "cyberradar-alerts-index"


def _env(*names: str, default: str = "") -> str:
    for name in names:
        value = os.getenv(name, "").strip()
        if value:
            return value
    return default


@dataclass(frozen=True, slots=True)
class StoreSettings:
    endpoint: str
    key: str
    database: str = DEFAULT_DATABASE
    container: str = DEFAULT_CONTAINER
    status_container: str = DEFAULT_STATUS_CONTAINER
    actions_container: str = DEFAULT_ACTIONS_CONTAINER

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint and self.key)


@dataclass(frozen=True, slots=True)
class SearchSettings:
    endpoint: str
    index: str
    api_key: str

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint and self.index and self.api_key)


@dataclass(frozen=True, slots=True)
class Settings:
    """Process-wide configuration, read once at startup."""

    store: StoreSettings
    search: SearchSettings
    log_level: str = "INFO"
    structured_logging: bool = False

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """Read settings from the environment, after loading a ``.env`` file if present."""
        if dotenv:
            load_dotenv()

        return cls(
            store=StoreSettings(
                endpoint=_env("COSMOS_ENDPOINT"),
                key=_env("COSMOS_KEY"),
                database=_env("COSMOS_DATABASE", default=DEFAULT_DATABASE),
                container=_env("COSMOS_CONTAINER", default=DEFAULT_CONTAINER),
                status_container=_env("COSMOS_STATUS_CONTAINER", default=DEFAULT_STATUS_CONTAINER),
                actions_container=_env(
                    "COSMOS_ACTIONS_CONTAINER", default=DEFAULT_ACTIONS_CONTAINER
                ),
            ),
            search=SearchSettings(
                endpoint=_env("SEARCH_ENDPOINT", "AZURE_SEARCH_ENDPOINT"),
                index=_env("SEARCH_INDEX", "AZURE_SEARCH_INDEX", default=DEFAULT_SEARCH_INDEX),
                api_key=_env("SEARCH_API_KEY", "AZURE_SEARCH_KEY"),
            ),
            log_level=_env("LOG_LEVEL", default="INFO").upper(),
            structured_logging=_env("STRUCTURED_LOGGING", default="false").lower() == "true",
        )

    def require_store(self) -> StoreSettings:
        if not self.store.is_configured:
            raise NotConfiguredError(
                "Alert store is not configured. Expected COSMOS_ENDPOINT and COSMOS_KEY."
            )
        return self.store
