from datetime import UTC, datetime

from sqlmodel import Field, Relationship, SQLModel

from ...domain.constants import (
    MAX_FEATURE_NAME_LENGTH,
    MAX_IMAGE_REF_LENGTH,
    MAX_NAME_LENGTH,
)
from ...domain.entities import Configuration as DomainConfiguration
from ...domain.entities import Feature as DomainFeature
from ...domain.entities import Option as DomainOption
from ...domain.entities import SelectedOption


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Feature(SQLModel, table=True):  # type: ignore[call-arg]
    """A configurable dimension of the car. Can be the roof."""

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True, max_length=MAX_FEATURE_NAME_LENGTH)

    options: list["FeatureOption"] = Relationship(back_populates="feature")

    def to_domain(self) -> DomainFeature:
        """Convert persistence model to domain entity, options ordered by id."""
        return DomainFeature(
            id=self.id,  # type: ignore[arg-type]
            name=self.name,
            options=tuple(
                option.to_domain()
                for option in sorted(self.options, key=lambda o: o.id or 0)
            ),
        )


class FeatureOption(SQLModel, table=True):  # type: ignore[call-arg]
    """One choice for a feature. Can be a panoramic sunroof."""

    id: int | None = Field(default=None, primary_key=True)
    feature_id: int = Field(foreign_key="feature.id", index=True, ondelete="RESTRICT")
    name: str = Field(max_length=MAX_NAME_LENGTH)
    price_in_cents: int = Field(default=0, ge=0)
    image: str = Field(default="", max_length=MAX_IMAGE_REF_LENGTH)
    # Set when the catalog is seeded; rules never inspect the name
    requires_convertible: bool = Field(default=False)

    feature: Feature | None = Relationship(back_populates="options")

    def to_domain(self) -> DomainOption:
        """Convert persistence model to domain entity."""
        return DomainOption(
            id=self.id,  # type: ignore[arg-type]
            feature_id=self.feature_id,
            name=self.name,
            price_in_cents=self.price_in_cents,
            image=self.image,
            requires_convertible=self.requires_convertible,
        )


class Car(SQLModel, table=True):  # type: ignore[call-arg]
    """A persisted custom car: a name plus one option per chosen feature."""

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(min_length=1, max_length=MAX_NAME_LENGTH)
    created_at: datetime = Field(default_factory=_utcnow, index=True)
    is_convertible: bool = Field(default=False)

    option_links: list["CarOption"] = Relationship(
        back_populates="car",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )

    def to_domain(self) -> DomainConfiguration:
        """Convert persistence model to domain entity, options ordered by feature."""
        links = sorted(self.option_links, key=lambda link: link.feature_id)
        return DomainConfiguration(
            id=self.id,  # type: ignore[arg-type]
            name=self.name,
            created_at=self.created_at,
            is_convertible=self.is_convertible,
            options=[link.to_selected_option() for link in links],
        )


class CarOption(SQLModel, table=True):  # type: ignore[call-arg]
    """Association row; keyed by (car, feature) so a feature holds one option."""

    car_id: int = Field(foreign_key="car.id", primary_key=True, ondelete="CASCADE")
    feature_id: int = Field(
        foreign_key="feature.id", primary_key=True, ondelete="RESTRICT"
    )
    option_id: int = Field(
        foreign_key="featureoption.id", index=True, ondelete="RESTRICT"
    )

    car: Car | None = Relationship(back_populates="option_links")
    option: FeatureOption | None = Relationship()

    def to_selected_option(self) -> SelectedOption:
        option = self.option
        if option is None or option.feature is None:
            raise LookupError(f"Option {self.option_id} is not loaded")
        return SelectedOption(
            id=option.id,  # type: ignore[arg-type]
            name=option.name,
            price_in_cents=option.price_in_cents,
            feature_id=option.feature_id,
            feature=option.feature.name,
            image=option.image,
        )
