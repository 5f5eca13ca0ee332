from typing import Final

from sqlmodel import Session

from ..domain.entities import Catalog
from ..infrastructure.database.repositories import CatalogRepository
from ..infrastructure.database.seed import CATALOG, seed_catalog
from ..logging_config import get_logger

logger: Final = get_logger(__name__)


def get_catalog(session: Session) -> Catalog:
    return CatalogRepository(session).load()


def ensure_catalog(session: Session, reset: bool = False) -> bool:
    """Seed the catalog if no feature exists yet, or unconditionally on reset.

    Returns:
        True if the catalog was seeded by this call
    """
    seeded = seed_catalog(session, CATALOG, reset=reset) > 0
    if not seeded:
        logger.debug("Catalog already present, nothing seeded")
    return seeded
