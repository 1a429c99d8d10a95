class StorageError(Exception):
    """Base class for failures reported by a record store."""
    pass


class EncodeError(StorageError):
    """Exception raised when a value cannot be written to the store."""
    pass


class DecodeError(StorageError):
    """Exception raised when stored data does not match the expected schema."""
    pass


class ValidationError(Exception):
    """Exception raised when a user-supplied value breaks a named field rule."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message
