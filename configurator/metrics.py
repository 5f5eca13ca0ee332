"""Business metrics for the configurator."""

from opentelemetry import metrics

from .logging_config import get_logger

logger = get_logger(__name__)

meter = metrics.get_meter(__name__)

# HTTP Request Metrics
http_request_duration = meter.create_histogram(
    name="http_request_duration_seconds",
    description="Duration of HTTP requests in seconds",
    unit="s",
)

http_requests_total = meter.create_counter(
    name="http_requests_total",
    description="Total number of HTTP requests",
)

http_request_errors = meter.create_counter(
    name="http_request_errors_total",
    description="Total number of HTTP request errors",
)

# Business Metrics
configurations_written_total = meter.create_counter(
    name="configurations_written_total",
    description="Total number of configurations created or replaced",
)

configurations_deleted_total = meter.create_counter(
    name="configurations_deleted_total",
    description="Total number of configurations deleted",
)

rule_violations_total = meter.create_counter(
    name="rule_violations_total",
    description="Total number of option selections rejected by a rule",
)

configuration_price_cents = meter.create_histogram(
    name="configuration_price_cents",
    description="Total price of persisted configurations",
    unit="cents",
)


def record_http_request(method: str, endpoint: str, status_code: int, duration: float):
    """Record HTTP request metrics."""
    labels = {"method": method, "endpoint": endpoint, "status_code": str(status_code)}

    http_request_duration.record(duration, labels)
    http_requests_total.add(1, labels)

    if status_code >= 400:
        http_request_errors.add(1, labels)


def record_configuration_written(action: str, total_price_in_cents: int):
    """Record a committed create or replace."""
    configurations_written_total.add(1, {"action": action})
    configuration_price_cents.record(total_price_in_cents, {"action": action})


def record_configuration_deleted():
    configurations_deleted_total.add(1)


def record_rule_violation(rule: str):
    """Record an option selection rejected by ``rule``."""
    rule_violations_total.add(1, {"rule": rule})
