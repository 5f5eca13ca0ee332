import logging
from collections.abc import Sequence
from typing import Any

from fastapi import Request

from .request_utils import get_client_ip

_PAST_TENSE = {"create": "created", "replace": "replaced", "delete": "deleted"}


def log_api_request(
    request: Request,
    response_status: int,
    process_time_ms: float,
    route: str,
) -> None:
    """Log one API call against its route template.

    Args:
        request: FastAPI request object
        response_status: HTTP response status code
        process_time_ms: Request processing time in milliseconds
        route: Route template, e.g. ``/api/cars/{car_id}``
    """
    logger = logging.getLogger("configurator.api")

    log_data: dict[str, Any] = {
        "method": request.method,
        "route": route,
        "status_code": response_status,
        "client_ip": get_client_ip(request),
        "process_time_ms": round(process_time_ms, 2),
    }
    car_id = request.path_params.get("car_id")
    if car_id is not None:
        log_data["car_id"] = car_id

    if response_status >= 500:
        log_level = logging.ERROR
    elif response_status >= 400:
        log_level = logging.WARNING
    else:
        log_level = logging.INFO

    target = f" car {car_id}" if car_id is not None else ""
    logger.log(
        log_level,
        f"{request.method} {route}{target} -> {response_status} "
        f"({process_time_ms:.1f}ms)",
        extra=log_data,
    )


def log_car_write(
    operation: str,
    car_id: int | None,
    success: bool = True,
    option_ids: Sequence[int] = (),
    error: str | None = None,
) -> None:
    """Log the outcome of a create, replace or delete transaction."""
    logger = logging.getLogger("configurator.store")

    log_data: dict[str, Any] = {
        "operation": operation,
        "car_id": car_id,
        "success": success,
        "option_ids": list(option_ids),
    }
    if success:
        message = f"Car {car_id} {_PAST_TENSE.get(operation, operation)}"
        if option_ids:
            message += f" with {len(option_ids)} options"
        logger.info(message, extra=log_data)
    else:
        log_data["error"] = error
        logger.error(f"Car {operation} rolled back: {error}", extra=log_data)


def log_catalog_seed(features: int, options: int, reset: bool) -> None:
    logging.getLogger("configurator.catalog").info(
        f"Catalog seeded with {features} features and {options} options"
        + (" after reset" if reset else ""),
        extra={"features": features, "options": options, "reset": reset},
    )


def log_rule_violation(
    feature: str, option: str, reason: str, logger_name: str = "configurator.rules"
) -> None:
    """Log a rejected option selection.

    Args:
        feature: Name of the feature the option belongs to
        option: Name of the rejected option
        reason: Human readable reason returned by the rule
    """
    logger = logging.getLogger(logger_name)

    logger.warning(
        f"Selection rejected: {option} ({feature})",
        extra={"feature": feature, "option": option, "reason": reason},
    )


def log_startup(
    hostname: str, ip_address: str, database_dialect: str, seed_on_startup: bool
) -> None:
    """Log where the configurator runs and which store backs it."""
    logging.getLogger("configurator.system").info(
        f"Configurator ready on {hostname} ({ip_address}) using {database_dialect}",
        extra={
            "hostname": hostname,
            "ip_address": ip_address,
            "database_dialect": database_dialect,
            "seed_on_startup": seed_on_startup,
        },
    )
