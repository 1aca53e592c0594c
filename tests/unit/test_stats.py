from datetime import UTC, date, datetime, timedelta

from cyberradar_portal.core.compliance import ComplianceSummary
from cyberradar_portal.core.stats import (
    SourceCount,
    build_portal_stats,
    change_percent,
    daily_counts,
    is_urgent,
)
from cyberradar_portal.domain import Alert, AlertCompliance, ComplianceTag, Severity

NOW = datetime(2025, 3, 10, 15, tzinfo=UTC)


def make_alert(alert_id: str, **kwargs: object) -> Alert:
    kwargs.setdefault("title", "Weekly digest")
    return Alert(id=alert_id, **kwargs)  # type: ignore[arg-type]


class TestIsUrgent:
    def test_flags(self) -> None:
        assert is_urgent(make_alert("a", is_actively_exploited=True))
        assert is_urgent(make_alert("b", is_zero_day=True))
        assert is_urgent(make_alert("c", ai_score=90))
        assert not is_urgent(make_alert("d", ai_score=89.9))
        assert not is_urgent(make_alert("e"))


class TestBuildPortalStats:
    def test_empty(self) -> None:
        stats = build_portal_stats([])
        assert stats.total_alerts == 0
        assert all(count == 0 for count in stats.by_severity.values())
        assert stats.by_topic == {}
        assert stats.by_source == ()
        assert stats.compliance == ComplianceSummary()
        assert stats.urgent_alerts == ()

    def test_counts(self) -> None:
        alerts = [
            make_alert("a", severity=Severity.CRITICAL, is_actively_exploited=True, source_name="CISA KEV"),
            make_alert("b", severity="HOCH", is_zero_day=True, source_name="CISA KEV"),  # type: ignore[arg-type]
            make_alert("c", severity=Severity.LOW, source_id="bsi-cert"),
            make_alert("d", title="Linux kernel flaw", severity=Severity.UNKNOWN),
        ]
        stats = build_portal_stats(alerts)

        assert stats.total_alerts == 4
        assert stats.by_severity[Severity.CRITICAL] == 1
        assert stats.by_severity[Severity.HIGH] == 1
        assert stats.by_severity[Severity.LOW] == 1
        assert Severity.UNKNOWN not in stats.by_severity
        assert stats.actively_exploited == 1
        assert stats.zero_days == 1
        assert stats.by_topic == {"general": 3, "linux": 1}
        assert stats.by_source[0] == SourceCount(source="CISA KEV", count=2)
        assert SourceCount(source="bsi-cert", count=1) in stats.by_source
        assert SourceCount(source="Unknown", count=1) in stats.by_source

    def test_urgent_and_recent_caps(self) -> None:
        alerts = [make_alert(f"a{i}", is_zero_day=True) for i in range(12)]
        stats = build_portal_stats(alerts)
        assert [a.id for a in stats.urgent_alerts] == ["a0", "a1", "a2", "a3", "a4"]
        assert len(stats.recent_alerts) == 10

    def test_compliance_rollup(self) -> None:
        tagged = make_alert(
            "a",
            compliance=AlertCompliance(dora=ComplianceTag(relevant="yes", reporting_required=True)),
        )
        stats = build_portal_stats([tagged])
        assert stats.compliance.dora.yes == 1
        assert stats.compliance.dora.reporting_required == 1


class TestDailyCounts:
    def test_buckets_oldest_first(self) -> None:
        alerts = [
            make_alert("today", published_at=NOW - timedelta(hours=1), severity=Severity.CRITICAL),
            make_alert("yesterday", published_at=NOW - timedelta(days=1)),
            make_alert("fetched-only", fetched_at=NOW - timedelta(days=6)),
            make_alert("too-old", published_at=NOW - timedelta(days=8)),
            make_alert("undated"),
        ]
        buckets = daily_counts(alerts, NOW, days=7)

        assert len(buckets) == 7
        assert buckets[0].date == date(2025, 3, 4)
        assert buckets[-1].date == date(2025, 3, 10)
        assert (buckets[-1].total, buckets[-1].critical) == (1, 1)
        assert buckets[-2].total == 1
        assert buckets[0].total == 1
        assert sum(bucket.total for bucket in buckets) == 3


class TestChangePercent:
    def test_increase_and_decrease(self) -> None:
        assert change_percent(15, 10) == 50.0
        assert change_percent(5, 10) == -50.0

    def test_one_decimal_half_up(self) -> None:
        # 1/3 -> 33.33 %, 2/3 -> 66.67 %
        assert change_percent(4, 3) == 33.3
        assert change_percent(5, 3) == 66.7

    def test_zero_previous(self) -> None:
        assert change_percent(12, 0) == 0.0
