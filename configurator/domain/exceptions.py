"""Domain-specific exceptions."""


class DomainError(Exception):
    """Base exception for domain errors."""

    pass


class ValidationError(DomainError):
    """Raised when client input is malformed (empty name, unknown option...)."""

    pass


class FeatureOptionMismatch(ValidationError):
    """Raised when an option is submitted under a feature it does not belong to."""

    def __init__(self, feature_id: int, option_id: int):
        self.feature_id = feature_id
        self.option_id = option_id
        super().__init__(
            f"Option {option_id} does not belong to feature {feature_id}"
        )


class RuleViolation(DomainError):
    """Raised when a selection breaks a business rule."""

    def __init__(self, feature: str, option: str, reason: str, rule: str = "unknown"):
        self.feature = feature
        self.option = option
        self.reason = reason
        self.rule = rule
        super().__init__(f"{option} ({feature}): {reason}")


class NotFoundError(DomainError):
    """Raised when an operation targets a configuration that does not exist."""

    def __init__(self, car_id: int):
        self.car_id = car_id
        super().__init__(f"Custom item with ID {car_id} not found.")


class PersistenceError(DomainError):
    """Raised after a failed transaction has been rolled back."""

    pass

