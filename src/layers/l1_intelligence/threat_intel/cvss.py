"""CVSS v3.x base score calculation from vector strings.

Implements the base metric equations of the CVSS v3.1 specification
(https://www.first.org/cvss/v3.1/specification-document), which also apply
to v3.0 vectors.
"""

import math
from typing import Any

ATTACK_VECTOR = {"N": 0.85, "A": 0.62, "L": 0.55, "P": 0.2}
ATTACK_COMPLEXITY = {"L": 0.77, "H": 0.44}
PRIVILEGES_UNCHANGED = {"N": 0.85, "L": 0.62, "H": 0.27}
PRIVILEGES_CHANGED = {"N": 0.85, "L": 0.68, "H": 0.5}
USER_INTERACTION = {"N": 0.85, "R": 0.62}
IMPACT = {"H": 0.56, "L": 0.22, "N": 0.0}

REQUIRED_METRICS = ("AV", "AC", "PR", "UI", "S", "C", "I", "A")


def roundup(value: float) -> float:
    """Round up to one decimal place, avoiding floating point artefacts."""
    int_input = round(value * 100000)
    if int_input % 10000 == 0:
        return int_input / 100000.0
    return (math.floor(int_input / 10000) + 1) / 10.0


def parse_vector(vector: str) -> dict[str, str] | None:
    """Split a CVSS v3 vector into its metrics.

    Args:
        vector: Vector such as ``CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:H/A:H``.

    Returns:
        Metric abbreviation to value, or None if not a complete v3 vector.
    """
    parts = vector.strip().split("/")
    if not parts or not parts[0].startswith("CVSS:3"):
        return None

    metrics: dict[str, str] = {}
    for part in parts[1:]:
        key, sep, value = part.partition(":")
        if not sep:
            return None
        metrics[key] = value

    if any(m not in metrics for m in REQUIRED_METRICS):
        return None
    return metrics


def base_score(vector: str) -> float | None:
    """Calculate the base score of a CVSS v3 vector.

    Args:
        vector: CVSS v3.0 or v3.1 vector string.

    Returns:
        Base score between 0.0 and 10.0, or None for unparsable vectors.
    """
    metrics = parse_vector(vector)
    if metrics is None:
        return None

    scope_changed = metrics["S"] == "C"
    if metrics["S"] not in ("U", "C"):
        return None

    privileges = PRIVILEGES_CHANGED if scope_changed else PRIVILEGES_UNCHANGED
    try:
        av = ATTACK_VECTOR[metrics["AV"]]
        ac = ATTACK_COMPLEXITY[metrics["AC"]]
        pr = privileges[metrics["PR"]]
        ui = USER_INTERACTION[metrics["UI"]]
        c = IMPACT[metrics["C"]]
        i = IMPACT[metrics["I"]]
        a = IMPACT[metrics["A"]]
    except KeyError:
        return None

    iss = 1 - (1 - c) * (1 - i) * (1 - a)
    if scope_changed:
        impact = 7.52 * (iss - 0.029) - 3.25 * (iss - 0.02) ** 15
    else:
        impact = 6.42 * iss

    if impact <= 0:
        return 0.0

    exploitability = 8.22 * av * ac * pr * ui
    if scope_changed:
        return roundup(min(1.08 * (impact + exploitability), 10))
    return roundup(min(impact + exploitability, 10))


def parse_cvss_score(score: Any) -> float | None:
    """Interpret an OSV ``CVSS_V3`` severity score.

    Args:
        score: Numeric score, numeric string, or v3 vector string. Any
            other type is treated as absent.

    Returns:
        Score, or None when the value cannot be interpreted.
    """
    if score is None or isinstance(score, bool):
        return None
    if isinstance(score, (int, float)):
        value = float(score)
    elif isinstance(score, str):
        text = score.strip()
        if text.upper().startswith("CVSS:"):
            return base_score(text)
        try:
            value = float(text)
        except ValueError:
            return None
    else:
        return None

    if math.isnan(value) or not 0 <= value <= 10:
        return None
    return value
