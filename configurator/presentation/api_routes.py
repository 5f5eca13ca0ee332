from datetime import datetime
from decimal import Decimal
from typing import Final

from fastapi import APIRouter, Depends, Path, status
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session

from ..application.catalog_service import get_catalog
from ..application.configuration_service import ConfigurationService
from ..constants import API_PREFIX
from ..domain.entities import Configuration
from ..infrastructure.database.database import get_session

api_router: Final = APIRouter(
    prefix=API_PREFIX,
    responses={
        400: {"description": "Bad Request - Invalid input data"},
        404: {"description": "Not Found - Custom car does not exist"},
        422: {"description": "Rule Violation - Selection breaks a business rule"},
        500: {"description": "Internal Server Error - Persistence failure"},
    },
)


def get_configuration_service(
    session: Session = Depends(get_session),
) -> ConfigurationService:
    return ConfigurationService(session)


# Request Models
class CarPayload(BaseModel):
    """Request body for creating or replacing a custom car."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(
        ...,
        description="Name of the custom car",
        examples=["Lightning McQueen"],
    )
    option_ids: list[int] = Field(
        ...,
        alias="optionIds",
        description="One option id per chosen feature",
        examples=[[3, 5, 9, 11]],
    )
    is_convertible: bool = Field(
        False, alias="isConvertible", description="Whether the car is a convertible"
    )


class SelectionCheckPayload(BaseModel):
    """Request body for the advisory selection check."""

    model_config = ConfigDict(populate_by_name=True)

    option_ids: list[int] = Field(default_factory=list, alias="optionIds")
    is_convertible: bool = Field(False, alias="isConvertible")


# Response Models
class OptionResponse(BaseModel):
    id: int
    name: str
    price_in_cents: int
    image: str
    requires_convertible: bool = Field(
        description="Option is only valid on convertibles"
    )


class FeatureResponse(BaseModel):
    id: int
    name: str
    options: list[OptionResponse]


class SelectedOptionResponse(BaseModel):
    id: int
    name: str
    price_in_cents: int
    feature_id: int
    feature: str = Field(description="Name of the feature the option belongs to")
    image: str


class CarResponse(BaseModel):
    """A persisted custom car with its derived price."""

    id: int
    name: str
    created_at: datetime
    is_convertible: bool
    total_price_in_cents: int = Field(description="Exact sum of option prices")
    total_price: Decimal = Field(description="Total price in display units")
    options: list[SelectedOptionResponse]

    @classmethod
    def from_domain(cls, configuration: Configuration) -> "CarResponse":
        return cls(
            id=configuration.id,
            name=configuration.name,
            created_at=configuration.created_at,
            is_convertible=configuration.is_convertible,
            total_price_in_cents=configuration.total_price_in_cents,
            total_price=configuration.total_price,
            options=[
                SelectedOptionResponse(
                    id=option.id,
                    name=option.name,
                    price_in_cents=option.price_in_cents,
                    feature_id=option.feature_id,
                    feature=option.feature,
                    image=option.image,
                )
                for option in configuration.options
            ],
        )


class CarWriteData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    option_ids: list[int] = Field(alias="optionIds")
    is_convertible: bool = Field(alias="isConvertible")


class CarWriteResponse(BaseModel):
    message: str
    data: CarWriteData

    @classmethod
    def from_domain(cls, message: str, configuration: Configuration) -> "CarWriteResponse":
        return cls(
            message=message,
            data=CarWriteData(
                id=configuration.id,
                name=configuration.name,
                option_ids=configuration.option_ids,
                is_convertible=configuration.is_convertible,
            ),
        )


class MessageResponse(BaseModel):
    message: str


class ViolationResponse(BaseModel):
    feature: str
    option: str
    reason: str


class SelectionCheckResponse(BaseModel):
    allowed: bool
    total_price_in_cents: int
    total_price: Decimal
    violations: list[ViolationResponse]


@api_router.get(
    "/features",
    response_model=list[FeatureResponse],
    tags=["catalog"],
    summary="List features and their options",
)
def api_list_features(
    *, session: Session = Depends(get_session)
) -> list[FeatureResponse]:
    """Every feature ordered by id, each with its options ordered by id."""
    catalog = get_catalog(session)
    return [
        FeatureResponse(
            id=feature.id,
            name=feature.name,
            options=[
                OptionResponse(
                    id=option.id,
                    name=option.name,
                    price_in_cents=option.price_in_cents,
                    image=option.image,
                    requires_convertible=option.requires_convertible,
                )
                for option in feature.options
            ],
        )
        for feature in catalog.features
    ]


@api_router.get(
    "/cars",
    response_model=list[CarResponse],
    tags=["cars"],
    summary="List custom cars, newest first",
)
def api_list_cars(
    *, service: ConfigurationService = Depends(get_configuration_service)
) -> list[CarResponse]:
    return [CarResponse.from_domain(car) for car in service.list_configurations()]


@api_router.get(
    "/cars/{car_id}",
    response_model=CarResponse,
    tags=["cars"],
    summary="Get one custom car",
)
def api_get_car(
    *,
    service: ConfigurationService = Depends(get_configuration_service),
    car_id: int = Path(description="Custom car id"),
) -> CarResponse:
    return CarResponse.from_domain(service.get_configuration(car_id))


@api_router.post(
    "/cars",
    response_model=CarWriteResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["cars"],
    summary="Create a custom car",
    description="""
    Validate the selection against the catalog and the selection rules, then
    store the car and its options in one transaction.

    **Rules**: convertible-only options (Panoramic Sunroof, Convertible Soft
    Top) are rejected with 422 unless `isConvertible` is true.
    """,
)
def api_create_car(
    *,
    service: ConfigurationService = Depends(get_configuration_service),
    payload: CarPayload,
) -> CarWriteResponse:
    car = service.create_configuration(
        payload.name, payload.option_ids, payload.is_convertible
    )
    return CarWriteResponse.from_domain("Custom item created successfully!", car)


@api_router.put(
    "/cars/{car_id}",
    response_model=CarWriteResponse,
    tags=["cars"],
    summary="Replace a custom car",
    description="""
    Full overwrite: the new name, flag and option set replace the stored ones
    entirely. There is no partial update.
    """,
)
def api_replace_car(
    *,
    service: ConfigurationService = Depends(get_configuration_service),
    car_id: int = Path(description="Custom car id"),
    payload: CarPayload,
) -> CarWriteResponse:
    car = service.replace_configuration(
        car_id, payload.name, payload.option_ids, payload.is_convertible
    )
    return CarWriteResponse.from_domain(
        f"Custom item {car_id} updated successfully!", car
    )


@api_router.delete(
    "/cars/{car_id}",
    response_model=MessageResponse,
    tags=["cars"],
    summary="Delete a custom car",
)
def api_delete_car(
    *,
    service: ConfigurationService = Depends(get_configuration_service),
    car_id: int = Path(description="Custom car id"),
) -> MessageResponse:
    service.delete_configuration(car_id)
    return MessageResponse(message=f"Custom item {car_id} deleted successfully.")


@api_router.post(
    "/selections/check",
    response_model=SelectionCheckResponse,
    tags=["cars"],
    summary="Check a selection without saving it",
    description="""
    Advisory check for interactive clients. Runs the same rules as create and
    replace and reports every violation together with the running price.
    Create and replace re-check regardless of this result.
    """,
)
def api_check_selection(
    *,
    service: ConfigurationService = Depends(get_configuration_service),
    payload: SelectionCheckPayload,
) -> SelectionCheckResponse:
    result = service.check_selection(payload.option_ids, payload.is_convertible)
    return SelectionCheckResponse(
        allowed=result.allowed,
        total_price_in_cents=result.total_price_in_cents,
        total_price=result.total_price,
        violations=[
            ViolationResponse(
                feature=violation.feature,
                option=violation.option,
                reason=violation.reason,
            )
            for violation in result.violations
        ],
    )
