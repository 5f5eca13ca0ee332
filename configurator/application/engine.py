"""Configuration engine.

Turns a proposed selection into a validated ``ProposedConfiguration`` against
a catalog snapshot. Nothing here touches the database and nothing raises for
expected failures: callers receive either the configuration or the error
describing why it was rejected.
"""

from collections.abc import Iterable, Mapping

from ..domain.entities import (
    Catalog,
    Option,
    ProposedConfiguration,
    check_configuration_name,
)
from ..domain.exceptions import FeatureOptionMismatch, RuleViolation, ValidationError
from ..domain.rules import check_option


def selection_from_option_ids(
    catalog: Catalog, option_ids: Iterable[int]
) -> dict[int, int] | ValidationError:
    """Group a flat list of option ids by the feature they belong to.

    Repeated ids collapse into one. Two different options for the same
    feature, or an id missing from the catalog, are rejected.
    """
    selection: dict[int, int] = {}
    for option_id in option_ids:
        option = catalog.option(option_id)
        if option is None:
            return ValidationError(f"Option {option_id} does not exist")

        chosen = selection.get(option.feature_id)
        if chosen is not None and chosen != option.id:
            feature = catalog.feature_of(option)
            return ValidationError(
                f"Only one option can be selected for {feature.name} "
                f"(got {chosen} and {option.id})"
            )
        selection[option.feature_id] = option.id
    return selection


def _resolve(
    catalog: Catalog, proposed_selection: Mapping[int, int]
) -> dict[int, Option] | ValidationError:
    resolved: dict[int, Option] = {}
    for feature_id, option_id in proposed_selection.items():
        if catalog.feature(feature_id) is None:
            return ValidationError(f"Feature {feature_id} does not exist")

        option = catalog.option(option_id)
        if option is None:
            return ValidationError(f"Option {option_id} does not exist")
        if option.feature_id != feature_id:
            return FeatureOptionMismatch(feature_id, option_id)

        resolved[feature_id] = option
    return resolved


def build_configuration(
    catalog: Catalog,
    name: str | None,
    proposed_selection: Mapping[int, int],
    is_convertible: bool = False,
) -> ProposedConfiguration | ValidationError | RuleViolation:
    """Validate a proposal and return the configuration it describes.

    Args:
        catalog: Catalog snapshot the proposal is checked against
        name: Configuration name, trimmed before use
        proposed_selection: Feature id to option id; features may be omitted
        is_convertible: Convertible flag of the car

    Returns:
        A ``ProposedConfiguration`` that satisfies every rule, or the first
        ``ValidationError``/``RuleViolation`` found. Nothing is applied
        partially.
    """
    name_error = check_configuration_name(name)
    if name_error is not None:
        return name_error

    resolved = _resolve(catalog, proposed_selection)
    if isinstance(resolved, ValidationError):
        return resolved

    for option in resolved.values():
        violation = check_option(catalog, option, resolved, is_convertible)
        if violation is not None:
            return violation

    return ProposedConfiguration(
        name=(name or "").strip(),
        selection=resolved,
        is_convertible=is_convertible,
    )
