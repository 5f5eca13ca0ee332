"""Selection rules.

A rule is a pure function ``(candidate, selection, is_convertible)`` that
returns a rejection reason, or ``None`` when the candidate is allowed. Rules
must not look at display names; anything a rule needs is an attribute of the
option set when the catalog is seeded.
"""

from collections.abc import Callable
from typing import Final

from .entities import Catalog, Option, Selection
from .exceptions import RuleViolation

Rule = Callable[[Option, Selection, bool], str | None]


def requires_convertible(
    candidate: Option, selection: Selection, is_convertible: bool
) -> str | None:
    """Convertible-only options (sunroof, soft top) need the convertible flag."""
    if candidate.requires_convertible and not is_convertible:
        return f"{candidate.name} is only available on convertibles"
    return None


# Evaluated in order; the first rejection wins
RULES: Final[tuple[Rule, ...]] = (requires_convertible,)


def is_selection_allowed(
    candidate: Option, selection: Selection, is_convertible: bool
) -> bool:
    return all(rule(candidate, selection, is_convertible) is None for rule in RULES)


def check_option(
    catalog: Catalog, candidate: Option, selection: Selection, is_convertible: bool
) -> RuleViolation | None:
    """Return the first rule violation for ``candidate``, if any."""
    for rule in RULES:
        reason = rule(candidate, selection, is_convertible)
        if reason is not None:
            return RuleViolation(
                feature=catalog.feature_of(candidate).name,
                option=candidate.name,
                reason=reason,
                rule=rule.__name__,
            )
    return None


def check_selection(
    catalog: Catalog, selection: Selection, is_convertible: bool
) -> list[RuleViolation]:
    """Evaluate every selected option against the rest of the selection."""
    violations = []
    for option in selection.values():
        violation = check_option(catalog, option, selection, is_convertible)
        if violation is not None:
            violations.append(violation)
    return violations
