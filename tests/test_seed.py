"""Tests for catalog seeding and the demo cars."""

import pytest
from sqlmodel import Session, func, select

from configurator.application.configuration_service import ConfigurationService
from configurator.domain.entities import Catalog
from configurator.domain.exceptions import ValidationError
from configurator.infrastructure.database.models import Car, Feature, FeatureOption
from configurator.infrastructure.database.seed import SampleCar, seed_catalog


def _count(session: Session, model) -> int:
    return session.exec(select(func.count()).select_from(model)).one()


def test_seed_catalog_skips_existing_catalog(session: Session, catalog: Catalog):
    assert seed_catalog(session) == 0

    assert _count(session, Feature) == 4
    assert _count(session, FeatureOption) == 13


def test_seed_catalog_reset_drops_cars(session: Session, catalog: Catalog):
    ConfigurationService(session).seed_sample_cars()

    assert seed_catalog(session, reset=True) == 4

    assert _count(session, Car) == 0
    assert _count(session, Feature) == 4
    assert _count(session, FeatureOption) == 13


def test_sample_cars_pass_the_rules(session: Session, catalog: Catalog):
    created = ConfigurationService(session).seed_sample_cars()

    assert created == 3
    cars = ConfigurationService(session).list_configurations()
    assert all(len(car.options) == 4 for car in cars)


def test_sample_with_unknown_option_fails_before_saving(
    session: Session, catalog: Catalog
):
    samples = (
        SampleCar("Fine", ("Velocity Red", "Standard Roof")),
        SampleCar("Roofless", ("Velocity Red", "Targa Top")),
    )

    with pytest.raises(ValidationError, match="Targa Top"):
        ConfigurationService(session).seed_sample_cars(samples)

    assert _count(session, Car) == 0
