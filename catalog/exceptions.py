"""
Catalog exceptions.

Every failure the product service can raise derives from CatalogError and
carries the HTTP status the API layer answers with.
"""


class CatalogError(Exception):
    """Base exception for all catalog errors."""

    status_code = 500

    def __init__(self, message: str, code: str = None):
        """
        Initialize catalog error.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class ValidationError(CatalogError):
    """Raised when a required upload or field is missing or malformed."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(CatalogError):
    """Raised when no product matches an identifier or filter."""

    status_code = 404

    def __init__(self, message: str = "Product not found"):
        super().__init__(message, code="NOT_FOUND")


class StorageError(CatalogError):
    """Raised when a record store operation fails."""

    status_code = 500

    def __init__(self, message: str = "Record store operation failed"):
        super().__init__(message, code="STORAGE_ERROR")


class MediaError(CatalogError):
    """Raised when an upload or delete against the media host fails."""

    status_code = 502

    def __init__(self, message: str = "Media host request failed"):
        super().__init__(message, code="MEDIA_ERROR")


class DataIntegrityError(CatalogError):
    """Raised when a stored product identifier is malformed."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message, code="DATA_INTEGRITY_ERROR")


class DuplicateKeyError(StorageError):
    """Raised when a write violates a unique index (product id or model number)."""

    def __init__(self, message: str = "Unique constraint violated"):
        super().__init__(message)
        self.code = "DUPLICATE_KEY"
