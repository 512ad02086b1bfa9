# core/exceptions.py
"""
Fatal errors raised by the intake service.

Client input problems and profanity are not exceptions: they are returned as
typed response variants (see schemas.messages). Everything here ends the
request with a 5xx.
"""


class MessageServiceError(Exception):
    """Base exception for intake service errors."""


class DependencyIntegrityError(MessageServiceError):
    """Raised when a downstream dependency answers with incomplete data."""


class ConfigurationError(MessageServiceError):
    """Raised when a collaborator cannot be built from the current settings."""
