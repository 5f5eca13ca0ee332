"""Tests for the seeding command."""

import pytest
from sqlmodel import Session, func, select
from typer.testing import CliRunner

from configurator import cli
from configurator.infrastructure.database.models import Car, Feature, FeatureOption

runner = CliRunner()


@pytest.fixture(autouse=True)
def use_test_engine(engine, monkeypatch):
    monkeypatch.setattr(cli, "get_main_engine", lambda: engine)


def _count(engine, model) -> int:
    with Session(engine) as session:
        return session.exec(select(func.count()).select_from(model)).one()


def test_seed_creates_catalog(engine):
    result = runner.invoke(cli.app, ["seed"])

    assert result.exit_code == 0, result.output
    assert "Catalog seeded" in result.output
    assert _count(engine, Feature) == 4
    assert _count(engine, FeatureOption) == 13
    with Session(engine) as session:
        tagged = session.exec(
            select(FeatureOption.name).where(FeatureOption.requires_convertible)
        ).all()
    assert sorted(tagged) == ["Convertible Soft Top", "Panoramic Sunroof"]


def test_seed_is_idempotent(engine):
    runner.invoke(cli.app, ["seed"])
    result = runner.invoke(cli.app, ["seed"])

    assert result.exit_code == 0, result.output
    assert "already present" in result.output
    assert _count(engine, Feature) == 4


def test_seed_with_samples_goes_through_rules(engine):
    result = runner.invoke(cli.app, ["seed", "--with-samples"])

    assert result.exit_code == 0, result.output
    assert _count(engine, Car) == 3
    with Session(engine) as session:
        convertibles = session.exec(
            select(Car.name).where(Car.is_convertible)
        ).all()
    assert sorted(convertibles) == ["Midnight Rider", "White Fox"]


def test_seed_reset_drops_existing_cars(engine):
    runner.invoke(cli.app, ["seed", "--with-samples"])

    result = runner.invoke(cli.app, ["seed", "--reset"])

    assert result.exit_code == 0, result.output
    assert _count(engine, Car) == 0
    assert _count(engine, Feature) == 4
