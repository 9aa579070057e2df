"""Errors raised by the user storage provider and its factory."""


class UserStorageError(Exception):
    """Base user storage error."""
    pass


class ComponentValidationError(UserStorageError):
    """Provider configuration is incomplete or the database is unreachable."""
    pass


class ProviderCreationError(UserStorageError):
    """A provider could not be activated for a session."""
    pass


class ReadOnlyError(UserStorageError):
    """The backing store does not accept credential writes."""
    pass


class TemplateError(UserStorageError):
    """The SQL template cannot be compiled or executed with the given parameters."""
    pass
