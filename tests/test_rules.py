"""Tests for the selection rules."""

import pytest

from configurator.domain.entities import Catalog, Feature, Option
from configurator.domain.rules import (
    check_option,
    check_selection,
    is_selection_allowed,
    requires_convertible,
)

STANDARD = Option(id=1, feature_id=10, name="Standard", price_in_cents=0)
PANORAMIC = Option(
    id=2,
    feature_id=10,
    name="Panoramic Sunroof",
    price_in_cents=120000,
    requires_convertible=True,
)
SOFT_TOP = Option(
    id=3,
    feature_id=10,
    name="Soft Top",
    price_in_cents=250000,
    requires_convertible=True,
)
RED = Option(id=4, feature_id=20, name="Velocity Red", price_in_cents=75000)

CATALOG = Catalog(
    features=(
        Feature(id=10, name="Roof", options=(STANDARD, PANORAMIC, SOFT_TOP)),
        Feature(id=20, name="Exterior", options=(RED,)),
    )
)


@pytest.mark.parametrize("option", [PANORAMIC, SOFT_TOP])
def test_convertible_only_option_rejected_without_flag(option: Option):
    assert not is_selection_allowed(option, {10: option}, False)
    assert requires_convertible(option, {10: option}, False) is not None


@pytest.mark.parametrize("option", [PANORAMIC, SOFT_TOP])
def test_convertible_only_option_allowed_with_flag(option: Option):
    assert is_selection_allowed(option, {10: option}, True)


@pytest.mark.parametrize("is_convertible", [False, True])
def test_untagged_options_always_allowed(is_convertible: bool):
    for option in (STANDARD, RED):
        assert is_selection_allowed(option, {option.feature_id: option}, is_convertible)


def test_rule_ignores_display_name():
    """An untagged option is allowed even if its name looks convertible-only."""
    lookalike = Option(
        id=5, feature_id=10, name="Convertible Soft Top Cover", price_in_cents=100
    )
    assert is_selection_allowed(lookalike, {10: lookalike}, False)


def test_check_option_reports_feature_and_option():
    violation = check_option(CATALOG, SOFT_TOP, {10: SOFT_TOP, 20: RED}, False)

    assert violation is not None
    assert violation.feature == "Roof"
    assert violation.option == "Soft Top"
    assert "convertible" in violation.reason
    assert violation.rule == "requires_convertible"


def test_check_option_returns_none_when_allowed():
    assert check_option(CATALOG, RED, {10: STANDARD, 20: RED}, False) is None


def test_check_selection_collects_violations():
    assert check_selection(CATALOG, {10: PANORAMIC, 20: RED}, False)[0].option == (
        "Panoramic Sunroof"
    )
    assert check_selection(CATALOG, {10: PANORAMIC, 20: RED}, True) == []
    assert check_selection(CATALOG, {}, False) == []
