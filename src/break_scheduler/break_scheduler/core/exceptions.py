class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConfigError(ValidationError):
    """Raised when an agent's shift configuration cannot be parsed."""


class StoreError(DomainError):
    """Base exception for storage failures (tick-local, retried next tick)."""


class StoreReadError(StoreError):
    """Raised when a repository read fails or times out."""


class StoreWriteError(StoreError):
    """Raised when a repository write fails or times out."""
