"""
Domain exceptions raised by the service layer.

Routers translate these into HTTP responses; services never build
``HTTPException`` themselves.
"""


class ServiceCenterError(Exception):
    """Base class for all service center errors."""
    pass


class NotFoundError(ServiceCenterError):
    """A requested record does not exist."""
    pass


class InvalidStatusError(ServiceCenterError, ValueError):
    """A status string does not name a known service status."""
    pass


class AuthenticationError(ServiceCenterError):
    """A token is missing, malformed, expired or belongs to no active user."""
    pass


class AccessDeniedError(ServiceCenterError):
    """The caller is authenticated but may not touch the record."""
    pass


class EmailDeliveryError(ServiceCenterError):
    """An email could not be handed to the mail provider."""
    pass


class PdfGenerationError(ServiceCenterError, RuntimeError):
    """A bill document could not be rendered."""
    pass
