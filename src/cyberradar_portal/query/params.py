from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from cyberradar_portal.core.time_range import resolve_time_range
from cyberradar_portal.domain import Framework, Severity, TimeRange

SortKey = Literal["score", "date", "severity"]
SortDir = Literal["ASC", "DESC"]

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 100

_FILTERABLE_SEVERITIES = frozenset(
    severity.value for severity in Severity if severity is not Severity.UNKNOWN
)
_FRAMEWORKS = frozenset(framework.value for framework in Framework)


def split_list(value: str | Sequence[str] | None) -> tuple[str, ...]:
    """Accept ``"a,b"`` or ``["a", "b"]`` and return the trimmed non-empty items."""
    if not value:
        return ()
    items = value.split(",") if isinstance(value, str) else value
    return tuple(item.strip() for item in items if item and item.strip())


def normalize_sort_by(value: str | None) -> SortKey:
    key = (value or "").strip().lower()
    if key in ("date", "publishedat"):
        return "date"
    if key == "severity":
        return "severity"
    return "score"


def normalize_sort_dir(value: str | None) -> SortDir:
    return "ASC" if (value or "").strip().upper() == "ASC" else "DESC"


def _parse_int(value: object, default: int) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def _parse_flag(value: object) -> bool:
    return str(value or "").strip().lower() == "true"


@dataclass(frozen=True, slots=True)
class AlertQuery:
    """Filter, window, sort and paging parameters for an alert listing."""

    severities: tuple[str, ...] = ()
    topics: tuple[str, ...] = ()
    sources: tuple[str, ...] = ()
    alert_types: tuple[str, ...] = ()
    frameworks: tuple[str, ...] = ()
    search: str = ""
    reporting_only: bool = False
    exploited_only: bool = False
    start: datetime | None = None
    end: datetime | None = None
    sort_by: SortKey = "score"
    sort_dir: SortDir = "DESC"
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "severities",
            tuple(s.lower() for s in self.severities if s.lower() in _FILTERABLE_SEVERITIES),
        )
        object.__setattr__(self, "topics", tuple(t.lower() for t in self.topics))
        object.__setattr__(
            self,
            "frameworks",
            tuple(f.lower() for f in self.frameworks if f.lower() in _FRAMEWORKS),
        )
        object.__setattr__(self, "search", self.search.strip())

    def validate(self) -> None:
        if self.page < 1:
            raise ValueError("page must be at least 1")

        if not 1 <= self.page_size <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")

        if self.start is not None and self.end is not None and self.end < self.start:
            raise ValueError("end must not be before start")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @classmethod
    def for_window(cls, window: TimeRange, **kwargs: object) -> "AlertQuery":
        return cls(start=window.start, end=window.end, **kwargs)  # type: ignore[arg-type]

    @classmethod
    def from_params(
        cls, params: Mapping[str, str], now: datetime | None = None, default_days: int = 0
    ) -> tuple["AlertQuery", TimeRange]:
        """Build a query from request parameters.

        Malformed numbers fall back to defaults and page size is clamped, so
        this never raises on user input. Returns the query together with the
        resolved time window.
        """
        days_raw = params.get("days")
        days = _parse_int(days_raw, default_days) if days_raw not in (None, "") else default_days

        window = resolve_time_range(
            days=days,
            start_date=params.get("startDate") or params.get("from"),
            end_date=params.get("endDate") or params.get("to"),
            now=now,
        )

        query = cls(
            severities=split_list(params.get("severity")),
            topics=split_list(params.get("topic")),
            sources=split_list(params.get("source")),
            alert_types=split_list(params.get("type") or params.get("alertType")),
            frameworks=split_list(params.get("compliance")),
            search=params.get("search") or "",
            reporting_only=_parse_flag(params.get("reportingOnly")),
            exploited_only=_parse_flag(params.get("exploitedOnly")),
            start=window.start,
            end=window.end,
            sort_by=normalize_sort_by(params.get("sortBy")),
            sort_dir=normalize_sort_dir(params.get("sortDir")),
            page=max(1, _parse_int(params.get("page"), 1)),
            page_size=min(
                max(1, _parse_int(params.get("pageSize"), DEFAULT_PAGE_SIZE)), MAX_PAGE_SIZE
            ),
        )
        return query, window
