import random

import pytest

from cyberradar_portal.core.threat_score import (
    calculate_threat_score,
    round_half_up,
    score_alerts,
    threat_level_for,
)
from cyberradar_portal.domain import Alert, Severity, ThreatLevelName


def make_alert(
    index: int,
    severity: str = "low",
    exploited: bool = False,
    zero_day: bool = False,
    ai_score: float | None = None,
) -> Alert:
    return Alert(
        id=f"alert-{index}",
        title=f"Alert {index}",
        severity=severity,  # type: ignore[arg-type]
        is_actively_exploited=exploited,
        is_zero_day=zero_day,
        ai_score=ai_score,
    )


class TestCalculateThreatScore:
    def test_empty_window_is_normal(self) -> None:
        level = calculate_threat_score(0, 0, 0, 0, 0, 0)
        assert level.score == 0
        assert level.level is ThreatLevelName.NORMAL
        assert level.emoji == "🟢"

    def test_counts_ignored_when_total_zero(self) -> None:
        assert calculate_threat_score(10, 10, 10, 1, 100, 0).score == 0

    def test_weighted_sum(self) -> None:
        # 3*5 + 4*1.5 + 1*12 + 0 + 90*0.1
        level = calculate_threat_score(3, 4, 1, 0, 90, 20)
        assert level.score == 42
        assert level.level is ThreatLevelName.MODERATE
        assert level.label == "Moderate"
        assert level.color == "amber"

    def test_critical_term_saturates(self) -> None:
        assert calculate_threat_score(6, 0, 0, 0, 0, 6).score == 30
        assert calculate_threat_score(100, 0, 0, 0, 0, 100).score == 30

    def test_every_term_at_cap_reaches_100(self) -> None:
        level = calculate_threat_score(100, 100, 100, 5, 100, 300)
        assert level.score == 100
        assert level.level is ThreatLevelName.CRITICAL

    def test_zero_day_bonus_is_flat(self) -> None:
        one = calculate_threat_score(0, 0, 0, 1, 0, 1).score
        many = calculate_threat_score(0, 0, 0, 9, 0, 9).score
        assert one == many == 15

    def test_rounds_half_up(self) -> None:
        # 1.5 + 1.0 = 2.5
        assert calculate_threat_score(0, 1, 0, 0, 10, 1).score == 3

    def test_monotonic_in_each_count(self) -> None:
        base = (2, 3, 1, 0, 40.0, 10)
        for position in range(4):
            bumped = list(base)
            bumped[position] += 1
            assert (
                calculate_threat_score(*bumped).score >= calculate_threat_score(*base).score
            )

    def test_score_always_in_range(self) -> None:
        rng = random.Random(7)
        for _ in range(200):
            level = calculate_threat_score(
                rng.randint(0, 50),
                rng.randint(0, 50),
                rng.randint(0, 50),
                rng.randint(0, 5),
                rng.uniform(0, 100),
                rng.randint(1, 200),
            )
            assert 0 <= level.score <= 100


class TestThreatLevelFor:
    @pytest.mark.parametrize(
        "score, expected",
        [
            (0, ThreatLevelName.NORMAL),
            (29, ThreatLevelName.NORMAL),
            (30, ThreatLevelName.MODERATE),
            (49, ThreatLevelName.MODERATE),
            (50, ThreatLevelName.ELEVATED),
            (74, ThreatLevelName.ELEVATED),
            (75, ThreatLevelName.CRITICAL),
            (100, ThreatLevelName.CRITICAL),
        ],
    )
    def test_boundaries(self, score: int, expected: ThreatLevelName) -> None:
        assert threat_level_for(score).level is expected

    def test_presentation(self) -> None:
        level = threat_level_for(80)
        assert (level.label, level.color, level.emoji) == ("Critical", "red", "🔴")
        level = threat_level_for(55)
        assert (level.label, level.color, level.emoji) == ("Elevated", "orange", "🟠")


class TestRoundHalfUp:
    def test_halves_round_up(self) -> None:
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(41.5) == 42

    def test_below_half_rounds_down(self) -> None:
        assert round_half_up(41.49) == 41


class TestScoreAlerts:
    def test_empty(self) -> None:
        assert score_alerts([]).score == 0

    def test_counts_from_alerts(self) -> None:
        alerts = [make_alert(i, severity="critical") for i in range(3)]
        alerts += [make_alert(10 + i, severity="high") for i in range(4)]
        alerts.append(make_alert(20, exploited=True, ai_score=90))
        alerts += [make_alert(30 + i) for i in range(12)]
        assert score_alerts(alerts).score == 42

    def test_legacy_severity_tokens_count(self) -> None:
        english = [make_alert(i, severity="critical") for i in range(2)]
        german = [make_alert(i, severity="KRITISCH") for i in range(2)]
        assert score_alerts(english) == score_alerts(german)

    def test_permutation_invariant(self) -> None:
        alerts = [
            make_alert(1, severity="critical", ai_score=72),
            make_alert(2, severity="high", exploited=True),
            make_alert(3, zero_day=True, ai_score=95),
            make_alert(4, severity="medium"),
            make_alert(5, severity=Severity.HIGH, ai_score=None),
        ]
        expected = score_alerts(alerts)
        rng = random.Random(3)
        for _ in range(20):
            shuffled = alerts[:]
            rng.shuffle(shuffled)
            assert score_alerts(shuffled) == expected

    def test_accepts_generator(self) -> None:
        assert score_alerts(make_alert(i, severity="critical") for i in range(2)).score == 10

    def test_single_worst_case_alert(self) -> None:
        # 5 + 12 + 15 + 100 * 0.1
        level = score_alerts(
            [make_alert(1, severity="critical", exploited=True, zero_day=True, ai_score=100)]
        )
        assert level.score == 42
        assert level.level is ThreatLevelName.MODERATE

    def test_adding_exploited_alert_never_lowers_score(self) -> None:
        severities = ["critical", "high", "medium", "low", "info", "KRITISCH", "unknown"]
        rng = random.Random(11)
        for _ in range(100):
            alerts = [
                make_alert(
                    i,
                    severity=rng.choice(severities),
                    exploited=rng.random() < 0.3,
                    zero_day=rng.random() < 0.1,
                    ai_score=rng.choice([None, rng.uniform(0, 100)]),
                )
                for i in range(rng.randint(0, 15))
            ]
            extra = make_alert(
                999,
                severity=rng.choice(severities),
                exploited=True,
                zero_day=rng.random() < 0.5,
                ai_score=rng.choice([None, rng.uniform(0, 100)]),
            )
            assert score_alerts([*alerts, extra]).score >= score_alerts(alerts).score
