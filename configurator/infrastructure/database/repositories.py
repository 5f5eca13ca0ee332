"""Infrastructure layer - Repository implementations."""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, col, select

from ...domain.entities import Catalog, Configuration, ProposedConfiguration
from ...domain.exceptions import NotFoundError, PersistenceError
from ...logging_config import get_logger
from ...logging_utils import log_car_write
from .models import Car, CarOption, Feature, FeatureOption

logger = get_logger(__name__)


def _car_with_options():
    return select(Car).options(
        selectinload(Car.option_links)  # type: ignore[arg-type]
        .selectinload(CarOption.option)  # type: ignore[arg-type]
        .selectinload(FeatureOption.feature)  # type: ignore[arg-type]
    )


class CatalogRepository:
    """Read access to the seeded features and options."""

    def __init__(self, session: Session):
        self.session = session

    def load(self) -> Catalog:
        """Snapshot the whole catalog, features and options ordered by id."""
        features = self.session.exec(
            select(Feature)
            .options(selectinload(Feature.options))  # type: ignore[arg-type]
            .order_by(col(Feature.id))
        ).all()
        return Catalog(features=tuple(feature.to_domain() for feature in features))

    def has_features(self) -> bool:
        return self.session.exec(select(Feature.id).limit(1)).first() is not None


class ConfigurationRepository:
    """Repository for car configurations.

    ``create``, ``replace`` and ``delete`` each run as one transaction: the
    car row and its whole option set are committed together or rolled back
    together.
    """

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _transaction(self, operation: str, car_id: int | None) -> Iterator[None]:
        try:
            yield
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            log_car_write(operation, car_id, success=False, error=str(e))
            raise PersistenceError(
                f"An internal server error occurred while trying to {operation} "
                "the item."
            ) from e
        except Exception:
            self.session.rollback()
            raise

    def _find(self, car_id: int) -> Car:
        car = self.session.exec(_car_with_options().where(Car.id == car_id)).first()
        if car is None:
            raise NotFoundError(car_id)
        return car

    @staticmethod
    def _links(proposed: ProposedConfiguration) -> list[CarOption]:
        return [
            CarOption(feature_id=feature_id, option_id=option.id)
            for feature_id, option in proposed.selection.items()
        ]

    def create(self, proposed: ProposedConfiguration) -> Configuration:
        """Insert the car and its option set atomically."""
        logger.debug("Creating configuration", car_name=proposed.name)
        car = Car(name=proposed.name, is_convertible=proposed.is_convertible)

        with self._transaction("create", None):
            car.option_links = self._links(proposed)
            self.session.add(car)

        log_car_write("create", car.id, option_ids=proposed.option_ids)
        return self.get(car.id)  # type: ignore[arg-type]

    def replace(self, car_id: int, proposed: ProposedConfiguration) -> Configuration:
        """Overwrite name, flag and the complete option set of an existing car."""
        logger.debug("Replacing configuration", car_id=car_id)
        car = self._find(car_id)

        with self._transaction("replace", car_id):
            car.name = proposed.name
            car.is_convertible = proposed.is_convertible
            # Old rows must be gone before new rows reuse their (car, feature) keys
            car.option_links.clear()
            self.session.flush()
            car.option_links.extend(self._links(proposed))
            self.session.add(car)

        log_car_write("replace", car_id, option_ids=proposed.option_ids)
        return self.get(car_id)

    def get(self, car_id: int) -> Configuration:
        return self._find(car_id).to_domain()

    def list(self) -> list[Configuration]:
        """All cars, most recently created first."""
        cars = self.session.exec(
            _car_with_options().order_by(
                col(Car.created_at).desc(), col(Car.id).desc()
            )
        ).all()
        return [car.to_domain() for car in cars]

    def delete(self, car_id: int) -> None:
        """Delete the car; its option rows go with it."""
        car = self._find(car_id)

        with self._transaction("delete", car_id):
            self.session.delete(car)

        log_car_write("delete", car_id)
