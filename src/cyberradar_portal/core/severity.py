from typing import Any

from cyberradar_portal.domain import Severity

_ALIASES: dict[str, Severity] = {
    **{severity.value: severity for severity in Severity},
    "kritisch": Severity.CRITICAL,
    "hoch": Severity.HIGH,
    "mittel": Severity.MEDIUM,
    "niedrig": Severity.LOW,
}

_RANKS: dict[Severity, int] = {
    Severity.CRITICAL: 5,
    Severity.HIGH: 4,
    Severity.MEDIUM: 3,
    Severity.LOW: 2,
    Severity.INFO: 1,
    Severity.UNKNOWN: 0,
}


def normalize_severity(raw: Any) -> Severity:
    """Map a raw severity token onto the canonical taxonomy.

    Accepts English tokens in any case plus the legacy German ones. Anything
    unrecognised, including ``None`` and non-strings, becomes ``UNKNOWN``.
    """
    if isinstance(raw, Severity):
        return raw
    if not isinstance(raw, str):
        return Severity.UNKNOWN
    return _ALIASES.get(raw.strip().lower(), Severity.UNKNOWN)


def severity_rank(raw: Any) -> int:
    return _RANKS[normalize_severity(raw)]
