"""Application layer - configuration use cases.

Each public method is one unit of work: snapshot the catalog, run the engine,
and hand an accepted proposal to the repository. Engine rejections are raised
here so the HTTP layer's exception handlers can render them.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Final

from sqlmodel import Session

from ..domain.entities import (
    Configuration,
    ProposedConfiguration,
    price_for_display,
    total_price_in_cents,
)
from ..domain.exceptions import RuleViolation, ValidationError
from ..domain.rules import check_selection
from ..infrastructure.database.repositories import ConfigurationRepository
from ..infrastructure.database.seed import SAMPLE_CARS, SampleCar
from ..logging_config import get_logger
from ..logging_utils import log_rule_violation
from ..metrics import (
    record_configuration_deleted,
    record_configuration_written,
    record_rule_violation,
)
from .catalog_service import get_catalog
from .engine import build_configuration, selection_from_option_ids

logger: Final = get_logger(__name__)


@dataclass
class SelectionCheck:
    """Advisory result for a selection that is not being saved."""

    allowed: bool
    total_price_in_cents: int
    violations: list[RuleViolation] = field(default_factory=list)

    @property
    def total_price(self) -> Decimal:
        return price_for_display(self.total_price_in_cents)


class ConfigurationService:
    """Application service for car configuration operations."""

    def __init__(self, session: Session):
        self.session = session
        self.repository = ConfigurationRepository(session)

    def _propose(
        self, name: str | None, option_ids: Sequence[int] | None, is_convertible: bool
    ) -> ProposedConfiguration:
        if not option_ids:
            raise ValidationError(
                'Please provide a "name" and a non-empty array of "optionIds".'
            )

        catalog = get_catalog(self.session)
        selection = selection_from_option_ids(catalog, option_ids)
        if isinstance(selection, ValidationError):
            raise selection

        outcome = build_configuration(catalog, name, selection, is_convertible)
        if isinstance(outcome, RuleViolation):
            log_rule_violation(outcome.feature, outcome.option, outcome.reason)
            record_rule_violation(outcome.rule)
            raise outcome
        if isinstance(outcome, ValidationError):
            raise outcome
        return outcome

    def create_configuration(
        self,
        name: str | None,
        option_ids: Sequence[int] | None,
        is_convertible: bool = False,
    ) -> Configuration:
        """Validate and persist a new configuration."""
        proposed = self._propose(name, option_ids, is_convertible)
        configuration = self.repository.create(proposed)

        record_configuration_written("create", configuration.total_price_in_cents)
        logger.info(
            "Configuration created",
            car_id=configuration.id,
            car_name=configuration.name,
            total_price_in_cents=configuration.total_price_in_cents,
        )
        return configuration

    def replace_configuration(
        self,
        car_id: int,
        name: str | None,
        option_ids: Sequence[int] | None,
        is_convertible: bool = False,
    ) -> Configuration:
        """Validate and fully overwrite an existing configuration."""
        proposed = self._propose(name, option_ids, is_convertible)
        configuration = self.repository.replace(car_id, proposed)

        record_configuration_written("replace", configuration.total_price_in_cents)
        logger.info(
            "Configuration replaced",
            car_id=car_id,
            total_price_in_cents=configuration.total_price_in_cents,
        )
        return configuration

    def get_configuration(self, car_id: int) -> Configuration:
        return self.repository.get(car_id)

    def list_configurations(self) -> list[Configuration]:
        return self.repository.list()

    def delete_configuration(self, car_id: int) -> None:
        self.repository.delete(car_id)
        record_configuration_deleted()
        logger.info("Configuration deleted", car_id=car_id)

    def check_selection(
        self, option_ids: Sequence[int], is_convertible: bool = False
    ) -> SelectionCheck:
        """Evaluate a selection without saving it.

        Uses the same rules as create and replace but reports every violation
        instead of stopping at the first one.
        """
        catalog = get_catalog(self.session)
        grouped = selection_from_option_ids(catalog, option_ids)
        if isinstance(grouped, ValidationError):
            raise grouped

        selection = {
            feature_id: option
            for feature_id, option_id in grouped.items()
            if (option := catalog.option(option_id)) is not None
        }
        violations = check_selection(catalog, selection, is_convertible)
        return SelectionCheck(
            allowed=not violations,
            total_price_in_cents=total_price_in_cents(selection.values()),
            violations=violations,
        )

    def seed_sample_cars(self, samples: Sequence[SampleCar] = SAMPLE_CARS) -> int:
        """Create the demo cars through the regular validation path."""
        catalog = get_catalog(self.session)
        by_name = {
            option.name: option.id
            for feature in catalog.features
            for option in feature.options
        }

        missing = sorted(
            {
                name
                for sample in samples
                for name in sample.options
                if name not in by_name
            }
        )
        if missing:
            raise ValidationError(
                "Sample cars use options missing from the catalog: "
                + ", ".join(missing)
            )

        for sample in samples:
            option_ids = [by_name[name] for name in sample.options]
            self.create_configuration(sample.name, option_ids, sample.is_convertible)
        return len(samples)
