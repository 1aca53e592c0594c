from collections.abc import Iterable
from dataclasses import dataclass, field

from cyberradar_portal.domain import Alert, ComplianceTag, Framework, TimeRange


@dataclass(frozen=True, slots=True)
class FrameworkCounts:
    yes: int = 0
    conditional: int = 0
    reporting_required: int = 0

    def __add__(self, other: "FrameworkCounts") -> "FrameworkCounts":
        return FrameworkCounts(
            yes=self.yes + other.yes,
            conditional=self.conditional + other.conditional,
            reporting_required=self.reporting_required + other.reporting_required,
        )

    @classmethod
    def from_tag(cls, tag: ComplianceTag | None) -> "FrameworkCounts":
        if tag is None:
            return cls()
        return cls(
            yes=int(tag.relevant == "yes"),
            conditional=int(tag.relevant == "conditional"),
            reporting_required=int(tag.reporting_required is True),
        )


@dataclass(frozen=True, slots=True)
class ComplianceSummary:
    """Per-framework rollup. ``ComplianceSummary()`` is the empty rollup."""

    nis2: FrameworkCounts = field(default_factory=FrameworkCounts)
    dora: FrameworkCounts = field(default_factory=FrameworkCounts)
    gdpr: FrameworkCounts = field(default_factory=FrameworkCounts)

    def __add__(self, other: "ComplianceSummary") -> "ComplianceSummary":
        return ComplianceSummary(
            nis2=self.nis2 + other.nis2,
            dora=self.dora + other.dora,
            gdpr=self.gdpr + other.gdpr,
        )

    def for_framework(self, framework: Framework) -> FrameworkCounts:
        return getattr(self, framework.value)


def _summary_for(alert: Alert) -> ComplianceSummary:
    compliance = alert.compliance
    if compliance is None:
        return ComplianceSummary()
    return ComplianceSummary(
        nis2=FrameworkCounts.from_tag(compliance.nis2),
        dora=FrameworkCounts.from_tag(compliance.dora),
        gdpr=FrameworkCounts.from_tag(compliance.gdpr),
    )


def aggregate_compliance(
    alerts: Iterable[Alert], window: TimeRange | None = None
) -> ComplianceSummary:
    """Count NIS2/DORA/GDPR relevance and reporting flags over ``alerts``.

    With a ``window``, alerts timestamped outside it are ignored. Alerts
    without any timestamp are always counted.
    """
    summary = ComplianceSummary()
    for alert in alerts:
        if window is not None and alert.timestamp is not None and not window.contains(alert.timestamp):
            continue
        summary = summary + _summary_for(alert)
    return summary


def requires_reporting(alert: Alert) -> bool:
    """True if any framework tag on the alert asks for a regulatory report."""
    if alert.compliance is None:
        return False
    return any(
        tag is not None and tag.reporting_required is True
        for tag in (alert.compliance.tag(framework) for framework in Framework)
    )
