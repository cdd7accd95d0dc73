"""
Per-field similarity primitives.

Each comparator is a pure function returning a score in [0, 1] where 1.0
means identical. Comparators are only called when both sides of a field
are present; absence is handled by the aggregator.
"""

from __future__ import annotations

import math
import re
from typing import Any, Iterable, Mapping

from rapidfuzz.distance import Levenshtein

from ..core.errors import ValidationError
from ..core.types import NumericMode, parse_numeric_mode

_SEPARATORS = re.compile(r"[\s\-_/]+")


def normalize_category(value: Any) -> str:
    """Case-fold a categorical value and collapse separators to single spaces."""
    return _SEPARATORS.sub(" ", str(value).casefold()).strip()


# =========================================================================
# Numeric
# =========================================================================


def compare_numeric(
    a: float,
    b: float,
    mode: NumericMode | str = NumericMode.tolerance,
    scale: float | None = None,
) -> float:
    """
    Compare two numbers.

    Modes:
        tolerance: max(0, 1 - |a - b| / scale). Small absolute differences
            degrade the score gently; scale is the difference at which the
            score reaches zero.
        ratio: min(|a|, |b|) / max(|a|, |b|), 1.0 when both are zero.
            Relative magnitude matters more than absolute difference.

    Raises:
        ValidationError: unknown mode, non-positive tolerance scale or
            non-finite input
    """
    mode = parse_numeric_mode(mode)
    try:
        a, b = float(a), float(b)
    except (TypeError, ValueError) as e:
        raise ValidationError("Numeric values must be numbers", f"{a!r}, {b!r}") from e
    if not (math.isfinite(a) and math.isfinite(b)):
        raise ValidationError("Numeric values must be finite", f"{a!r}, {b!r}")

    if mode is NumericMode.tolerance:
        if scale is None or scale <= 0:
            raise ValidationError("Tolerance mode requires a positive scale", repr(scale))
        return min(1.0, max(0.0, 1.0 - abs(a - b) / scale))

    high = max(abs(a), abs(b))
    if high == 0:
        return 1.0
    return min(abs(a), abs(b)) / high


# =========================================================================
# Categorical
# =========================================================================


def families_of(value: Any, family_groups: Mapping[str, Iterable[str]] | None) -> frozenset[str]:
    """All families a categorical value belongs to."""
    if not family_groups:
        return frozenset()
    key = normalize_category(value)
    found = set()
    for family, members in family_groups.items():
        if isinstance(members, str):
            members = (members,)
        if any(normalize_category(member) == key for member in members):
            found.add(family)
    return frozenset(found)


def family_of(value: Any, family_groups: Mapping[str, Iterable[str]] | None) -> str | None:
    """Return the family a categorical value belongs to, if any.

    When tables overlap, the first family in table order wins.
    """
    if not family_groups:
        return None
    key = normalize_category(value)
    for family, members in family_groups.items():
        if isinstance(members, str):
            members = (members,)
        if any(normalize_category(member) == key for member in members):
            return family
    return None


def compare_categorical(
    a: Any,
    b: Any,
    family_groups: Mapping[str, Iterable[str]] | None = None,
) -> float:
    """
    Compare two categorical values.

    Returns 1.0 for a case-insensitive match, 0.5 when both values share
    at least one family in family_groups, otherwise 0.0.
    """
    if normalize_category(a) == normalize_category(b):
        return 1.0

    if families_of(a, family_groups) & families_of(b, family_groups):
        return 0.5

    return 0.0


# =========================================================================
# Sets
# =========================================================================


def _as_member_set(values: Any) -> set[str]:
    if isinstance(values, str):
        values = (values,)
    return {str(v).strip().casefold() for v in values}


def compare_set(a: Iterable[str], b: Iterable[str]) -> float:
    """
    Jaccard index |A ∩ B| / |A ∪ B| over case-folded members.

    Two empty sets are identical (1.0): neither boat lists any features.
    """
    set_a = _as_member_set(a)
    set_b = _as_member_set(b)

    if not set_a and not set_b:
        return 1.0

    return len(set_a & set_b) / len(set_a | set_b)


# =========================================================================
# Free text
# =========================================================================


def compare_text(a: str, b: str) -> float:
    """
    Normalized Levenshtein similarity, case-insensitive.

    Similarity = 1 - (distance / max_length); two empty strings score 1.0.
    """
    text_a = str(a).casefold()
    text_b = str(b).casefold()

    if text_a == text_b:
        return 1.0

    max_length = max(len(text_a), len(text_b))
    distance = Levenshtein.distance(text_a, text_b)
    return 1.0 - (distance / max_length)


# =========================================================================
# Helpers
# =========================================================================


def normalize_score(score: float, minimum: float = 0.0, maximum: float = 1.0) -> float:
    """
    Clamp a score into [minimum, maximum] and rescale it to [0, 1].

    A degenerate range (minimum == maximum) yields 0.5.
    """
    if minimum > maximum:
        raise ValidationError("Score range is inverted", f"min={minimum}, max={maximum}")
    if minimum == maximum:
        return 0.5

    clamped = max(minimum, min(maximum, score))
    return (clamped - minimum) / (maximum - minimum)
