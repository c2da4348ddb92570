"""Custom exception hierarchy for coop-lending."""


class CoopLendingError(Exception):
    """Base exception for all coop-lending errors."""


class InvalidEntityStateError(CoopLendingError):
    """Raised when an entity is in an invalid state for the operation."""


class InvalidTransitionError(InvalidEntityStateError):
    """Raised when a loan status transition is not allowed."""


class DocumentLimitError(InvalidEntityStateError):
    """Raised when a document category would exceed its upload cap."""


class ConfigurationError(CoopLendingError):
    """Raised when configuration is invalid or missing."""


class StorageError(CoopLendingError):
    """Raised when the key-value storage cannot be read or written."""


class SchemaError(StorageError):
    """Raised when persisted data does not match the expected layout."""


class ExportError(CoopLendingError):
    """Raised when a spreadsheet export fails."""


class ExtractionError(CoopLendingError):
    """Raised when free-text field extraction fails."""
