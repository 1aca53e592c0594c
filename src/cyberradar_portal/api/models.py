from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class SqlQuerySpec:
    """A parameterized document-store query."""

    query: str
    parameters: tuple[tuple[str, Any], ...] = ()

    def parameter_list(self) -> list[dict[str, Any]]:
        return [{"name": name, "value": value} for name, value in self.parameters]


@dataclass(frozen=True, slots=True)
class SearchPage:
    results: tuple[dict[str, Any], ...] = field(default_factory=tuple)
    total: int = 0
