"""Tests for the configuration engine."""

import itertools
from decimal import Decimal

import pytest

from configurator.application.engine import (
    build_configuration,
    selection_from_option_ids,
)
from configurator.domain.entities import Catalog, ProposedConfiguration
from configurator.domain.exceptions import (
    FeatureOptionMismatch,
    RuleViolation,
    ValidationError,
)


def _roof(catalog: Catalog):
    return next(feature for feature in catalog.features if feature.name == "Roof")


def test_build_configuration_full_selection(catalog: Catalog, option_ids):
    selection = selection_from_option_ids(
        catalog,
        [
            option_ids["Velocity Red"],
            option_ids["Standard Roof"],
            option_ids["19-inch Sport"],
            option_ids["Black Synthetic"],
        ],
    )
    assert isinstance(selection, dict)

    result = build_configuration(catalog, "  Lightning McQueen  ", selection)

    assert isinstance(result, ProposedConfiguration)
    assert result.name == "Lightning McQueen"
    assert result.total_price_in_cents == 75000 + 0 + 80000 + 0
    assert result.total_price == Decimal("1550.00")
    assert len(result.selection) == 4


def test_partial_selection_is_allowed(catalog: Catalog, option_ids):
    wheels = option_ids["20-inch Performance"]
    feature_id = catalog.option(wheels).feature_id

    result = build_configuration(catalog, "Wheels only", {feature_id: wheels})

    assert isinstance(result, ProposedConfiguration)
    assert result.option_ids == [wheels]
    assert result.total_price_in_cents == 150000


@pytest.mark.parametrize("name", ["", "   ", None, "bad\nname"])
def test_invalid_name_is_rejected(catalog: Catalog, option_ids, name):
    standard = catalog.option(option_ids["Standard Roof"])

    result = build_configuration(catalog, name, {standard.feature_id: standard.id})

    assert isinstance(result, ValidationError)


def test_trailing_newline_is_trimmed_not_rejected(catalog: Catalog, option_ids):
    standard = catalog.option(option_ids["Standard Roof"])

    result = build_configuration(catalog, "Test\n", {standard.feature_id: standard.id})

    assert isinstance(result, ProposedConfiguration)
    assert result.name == "Test"


def test_option_under_wrong_feature_is_mismatch(catalog: Catalog, option_ids):
    red = option_ids["Velocity Red"]
    roof = _roof(catalog)

    result = build_configuration(catalog, "Mismatch", {roof.id: red})

    assert isinstance(result, FeatureOptionMismatch)
    assert result.feature_id == roof.id
    assert result.option_id == red


def test_unknown_feature_or_option_is_rejected(catalog: Catalog):
    roof = _roof(catalog)

    assert isinstance(build_configuration(catalog, "x", {9999: 1}), ValidationError)
    assert isinstance(
        build_configuration(catalog, "x", {roof.id: 9999}), ValidationError
    )


def test_every_convertible_only_option_needs_the_flag(catalog: Catalog):
    tagged = [
        option
        for feature in catalog.features
        for option in feature.options
        if option.requires_convertible
    ]
    assert {option.name for option in tagged} == {
        "Panoramic Sunroof",
        "Convertible Soft Top",
    }

    for option in tagged:
        rejected = build_configuration(
            catalog, "Test", {option.feature_id: option.id}, is_convertible=False
        )
        accepted = build_configuration(
            catalog, "Test", {option.feature_id: option.id}, is_convertible=True
        )

        assert isinstance(rejected, RuleViolation)
        assert rejected.feature == "Roof"
        assert rejected.option == option.name
        assert isinstance(accepted, ProposedConfiguration)


def test_price_is_exact_integer_sum_for_all_selections(catalog: Catalog):
    """Every combination of one option per feature sums in integer cents."""
    for combo in itertools.product(*(feature.options for feature in catalog.features)):
        selection = {option.feature_id: option.id for option in combo}
        result = build_configuration(catalog, "Combo", selection, is_convertible=True)

        assert isinstance(result, ProposedConfiguration)
        expected = sum(option.price_in_cents for option in combo)
        assert result.total_price_in_cents == expected
        assert isinstance(result.total_price_in_cents, int)
        assert result.total_price == Decimal(expected) / 100


def test_selection_from_option_ids_collapses_duplicates(catalog: Catalog, option_ids):
    red = option_ids["Velocity Red"]

    selection = selection_from_option_ids(catalog, [red, red])

    assert selection == {catalog.option(red).feature_id: red}


def test_selection_from_option_ids_rejects_two_options_for_one_feature(
    catalog: Catalog, option_ids
):
    result = selection_from_option_ids(
        catalog, [option_ids["Standard Roof"], option_ids["Panoramic Sunroof"]]
    )

    assert isinstance(result, ValidationError)
    assert "Roof" in str(result)


def test_selection_from_option_ids_rejects_unknown_option(catalog: Catalog):
    result = selection_from_option_ids(catalog, [123456])

    assert isinstance(result, ValidationError)
    assert "123456" in str(result)
