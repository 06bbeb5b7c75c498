"""
Exceptions raised by the service layer.

Routes translate these into HTTP errors; nothing below the API layer
knows about status codes.
"""


class ServiceError(Exception):
    """Base class for service failures the caller can act on."""


class NotFoundError(ServiceError):
    """A referenced entity does not exist."""


class ConflictError(ServiceError):
    """The operation conflicts with the current state of an entity."""


class InvalidCredentialsError(ServiceError):
    """Login failed."""
