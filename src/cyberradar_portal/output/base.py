from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from cyberradar_portal.domain import Alert


@runtime_checkable
class AlertExporter(Protocol):
    """Protocol for alert export destinations."""

    @property
    def name(self) -> str:
        ...

    async def export(self, alerts: Sequence[Alert]) -> int:
        ...
