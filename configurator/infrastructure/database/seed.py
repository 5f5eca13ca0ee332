"""Catalog seed data and the routine that loads it."""

from dataclasses import dataclass
from typing import Final

from sqlmodel import Session

from ...logging_config import get_logger
from ...logging_utils import log_catalog_seed
from .database import reset_db
from .models import Feature, FeatureOption
from .repositories import CatalogRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class OptionSeed:
    name: str
    price: int  # whole currency units
    image: str
    requires_convertible: bool = False

    @property
    def price_in_cents(self) -> int:
        return self.price * 100


@dataclass(frozen=True)
class SampleCar:
    name: str
    options: tuple[str, ...]
    is_convertible: bool = False


CATALOG: Final[dict[str, tuple[OptionSeed, ...]]] = {
    "Exterior": (
        OptionSeed("Polar White", 0, "/images/car-white.png"),
        OptionSeed("Obsidian Black", 500, "/images/car-black.png"),
        OptionSeed("Velocity Red", 750, "/images/car-red.png"),
        OptionSeed("Starlight Blue", 750, "/images/car-blue.png"),
    ),
    "Roof": (
        OptionSeed("Standard Roof", 0, "/images/roof-standard.png"),
        OptionSeed(
            "Panoramic Sunroof", 1200, "/images/roof-pano.png", requires_convertible=True
        ),
        OptionSeed(
            "Convertible Soft Top",
            2500,
            "/images/roof-convertible.png",
            requires_convertible=True,
        ),
    ),
    "Wheels": (
        OptionSeed("18-inch Aero", 0, "/images/wheels-aero.png"),
        OptionSeed("19-inch Sport", 800, "/images/wheels-sport.png"),
        OptionSeed("20-inch Performance", 1500, "/images/wheels-performance.png"),
    ),
    "Interior": (
        OptionSeed("Black Synthetic", 0, "/images/interior-black.png"),
        OptionSeed("White Premium", 1000, "/images/interior-white.png"),
        OptionSeed("Red Accent", 1250, "/images/interior-red.png"),
    ),
}

SAMPLE_CARS: Final[tuple[SampleCar, ...]] = (
    SampleCar(
        "Lightning McQueen",
        ("Velocity Red", "Standard Roof", "19-inch Sport", "Black Synthetic"),
    ),
    SampleCar(
        "White Fox",
        ("Polar White", "Panoramic Sunroof", "18-inch Aero", "White Premium"),
        is_convertible=True,
    ),
    SampleCar(
        "Midnight Rider",
        ("Obsidian Black", "Convertible Soft Top", "20-inch Performance", "Red Accent"),
        is_convertible=True,
    ),
)


def seed_catalog(
    session: Session,
    catalog: dict[str, tuple[OptionSeed, ...]] = CATALOG,
    reset: bool = False,
) -> int:
    """Insert features and their options in a single transaction.

    Does nothing when a feature already exists. With ``reset`` every table
    is dropped and recreated first, stored cars included.

    Returns:
        Number of features inserted, 0 if the catalog was already present
    """
    if reset:
        bind = session.get_bind()
        session.close()
        reset_db(bind)
        logger.warning("All tables dropped and recreated")
    elif CatalogRepository(session).has_features():
        logger.debug("Catalog already present, skipping seed")
        return 0

    try:
        for feature_name, options in catalog.items():
            feature = Feature(name=feature_name)
            feature.options = [
                FeatureOption(
                    name=option.name,
                    price_in_cents=option.price_in_cents,
                    image=option.image,
                    requires_convertible=option.requires_convertible,
                )
                for option in options
            ]
            session.add(feature)
        session.commit()
    except Exception:
        session.rollback()
        logger.error("Catalog seed rolled back")
        raise

    log_catalog_seed(
        features=len(catalog),
        options=sum(len(options) for options in catalog.values()),
        reset=reset,
    )
    return len(catalog)
