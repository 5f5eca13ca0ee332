"""Pure domain entities without infrastructure dependencies."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from .constants import CENTS_PER_UNIT, MAX_NAME_LENGTH
from .exceptions import ValidationError

_DISPLAY_QUANTUM = Decimal("0.01")


def check_configuration_name(name: str | None) -> ValidationError | None:
    """Check a configuration name against the domain naming rules.

    Returns the error instead of raising so the engine can report it as a
    plain result.
    """
    if name is None or not name.strip():
        return ValidationError("Configuration name cannot be empty")

    name = name.strip()
    if len(name) > MAX_NAME_LENGTH:
        return ValidationError(
            f"Configuration name cannot be longer than {MAX_NAME_LENGTH} characters"
        )

    for char in name:
        if (ord(char) < 32 and char not in [" "]) or ord(char) == 127:
            return ValidationError(
                "Configuration name cannot contain newlines, tabs, "
                + "or other control characters"
            )

    return None


def price_for_display(price_in_cents: int) -> Decimal:
    """Convert integer cents to display units with two decimals.

    Arithmetic on prices always happens in cents; this is presentation only.
    """
    return (Decimal(price_in_cents) / CENTS_PER_UNIT).quantize(
        _DISPLAY_QUANTUM, rounding=ROUND_HALF_UP
    )


def total_price_in_cents(options: Iterable["Option"]) -> int:
    return sum((option.price_in_cents for option in options), 0)


@dataclass(frozen=True)
class Option:
    """One concrete choice within a feature (e.g. Panoramic Sunroof)."""

    id: int
    feature_id: int
    name: str
    price_in_cents: int
    image: str = ""
    requires_convertible: bool = False


@dataclass(frozen=True)
class Feature:
    """A configurable dimension of the car (e.g. Roof)."""

    id: int
    name: str
    options: tuple[Option, ...] = ()


@dataclass(frozen=True)
class Catalog:
    """Snapshot of every feature and option, taken once per request."""

    features: tuple[Feature, ...]
    _features_by_id: dict[int, Feature] = field(init=False, repr=False, compare=False)
    _options_by_id: dict[int, Option] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # Frozen dataclass: indexes are written through object.__setattr__
        object.__setattr__(
            self, "_features_by_id", {feature.id: feature for feature in self.features}
        )
        object.__setattr__(
            self,
            "_options_by_id",
            {option.id: option for feature in self.features for option in feature.options},
        )

    def feature(self, feature_id: int) -> Feature | None:
        return self._features_by_id.get(feature_id)

    def option(self, option_id: int) -> Option | None:
        return self._options_by_id.get(option_id)

    def feature_of(self, option: Option) -> Feature:
        return self._features_by_id[option.feature_id]


# Selection maps feature id to the option chosen for it, so a feature can
# never carry two options.
Selection = Mapping[int, Option]


@dataclass(frozen=True)
class ProposedConfiguration:
    """A validated, not yet persisted configuration produced by the engine."""

    name: str
    selection: dict[int, Option]
    is_convertible: bool = False

    @property
    def option_ids(self) -> list[int]:
        return [option.id for option in self.selection.values()]

    @property
    def total_price_in_cents(self) -> int:
        return total_price_in_cents(self.selection.values())

    @property
    def total_price(self) -> Decimal:
        return price_for_display(self.total_price_in_cents)


@dataclass
class SelectedOption:
    """An option as it appears inside a persisted configuration."""

    id: int
    name: str
    price_in_cents: int
    feature_id: int
    feature: str
    image: str = ""


@dataclass
class Configuration:
    """Core business entity: a named, persisted car configuration."""

    id: int
    name: str
    created_at: datetime
    is_convertible: bool = False
    options: list[SelectedOption] = field(default_factory=list)

    @property
    def option_ids(self) -> list[int]:
        return [option.id for option in self.options]

    @property
    def total_price_in_cents(self) -> int:
        return sum((option.price_in_cents for option in self.options), 0)

    @property
    def total_price(self) -> Decimal:
        return price_for_display(self.total_price_in_cents)
