"""Error taxonomy shared by the proxy and the client controller."""
from __future__ import annotations


class FormAssistError(Exception):
    """Base error; carries the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(FormAssistError):
    status_code = 400


class ConfigurationError(FormAssistError):
    status_code = 500


class UpstreamError(FormAssistError):
    """Non-success response from the service called; status and body pass through."""

    def __init__(self, status_code: int, body: str, message: str = "Failed to generate text from AI") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ParseError(FormAssistError):
    pass


class TransportError(FormAssistError):
    """The proxy could not be reached (client side only)."""
