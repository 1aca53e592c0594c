import json
from collections.abc import Sequence
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any

from cyberradar_portal.domain import Alert


def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.title() for part in rest)


def _camelize(value: Any) -> Any:
    if isinstance(value, dict):
        return {_camel(str(key)): _camelize(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [_camelize(item) for item in value]
    return value


class JsonlAlertExporter:
    """Writes one camelCase JSON document per alert per line.

    Keys follow the stored document shape (``aiScore``, ``publishedAt``) so
    an export can be diffed against the alert store.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def name(self) -> str:
        return "jsonl"

    @property
    def path(self) -> Path:
        return self._path

    async def export(self, alerts: Sequence[Alert]) -> int:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("w", encoding="utf-8") as handle:
            for alert in alerts:
                handle.write(self.serialize(alert) + "\n")
        return len(alerts)

    def serialize(self, alert: Alert) -> str:
        return json.dumps(
            _camelize(asdict(alert)), default=self._json_default, ensure_ascii=False
        )

    @staticmethod
    def _json_default(obj: Any) -> Any:
        if isinstance(obj, datetime):
            return obj.isoformat()
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
