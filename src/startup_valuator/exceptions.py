"""Domain-specific exceptions for valuation and scoring workflows."""


class ValidationError(ValueError):
    """Raised when valuation input data is incomplete or invalid."""


class MissingPrerequisiteDataError(ValidationError):
    """Raised when the company or valuation context is absent entirely."""


class InvalidNumericInputError(ValidationError):
    """Raised when a questionnaire answer cannot be read as a number."""


class PersistenceError(RuntimeError):
    """Raised when a write-back to a score, valuation or benchmark store fails."""
