from collections.abc import Sequence

from cyberradar_portal.core.threat_score import score_alerts
from cyberradar_portal.domain import Alert


class ConsoleAlertExporter:
    """Console output for alerts, headed by the window's threat level."""

    def __init__(self, prefix: str = "[ALERT]", title_width: int = 60) -> None:
        self._prefix = prefix
        self._title_width = title_width

    @property
    def name(self) -> str:
        return "console"

    async def export(self, alerts: Sequence[Alert]) -> int:
        level = score_alerts(alerts)
        print(f"{level.emoji} Threat level {level.label} ({level.score}/100) - {len(alerts)} alert(s)")

        for alert in alerts:
            title = alert.display_title[: self._title_width]
            if len(alert.display_title) > self._title_width:
                title += "..."

            score = f"{alert.ai_score:.0f}" if alert.ai_score is not None else "-"
            flags = " EXPLOITED" if alert.is_actively_exploited else ""
            if alert.is_zero_day:
                flags += " ZERO-DAY"
            print(f"{self._prefix} [{alert.severity.upper()}] {score:>3} {title}{flags}")

        return len(alerts)
