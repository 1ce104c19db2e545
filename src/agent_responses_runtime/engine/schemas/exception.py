# -*- coding: utf-8 -*-
"""
Responses Runtime Exception Definitions
Provides a three-level exception structure:
Base Class -> HTTP Status Exceptions -> Business Exceptions
"""

from typing import Any, Dict, Optional

from .response_api import ResponseError


class AppBaseException(Exception):
    """
    Business exception base class

    Attributes:
        status: HTTP status code, aligned with standard HTTP status codes
        code: Business error code, used for business logic distinction
        message: Error message
        details: Additional error details
    """

    def __init__(
        self,
        status: int,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.status = status
        self.code = code
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.status}] {self.code}: {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(status={self.status}, code="
            f"'{self.code}', message='{self.message}')"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary"""
        return {
            "status": self.status,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }

    def to_error_body(self) -> Dict[str, Any]:
        """Render the OpenAI-style ``{"error": {...}}`` payload."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "type": self.__class__.__name__,
            },
        }


# ==================== HTTP Status Exceptions ====================


class BadRequestException(AppBaseException):
    """400 Bad Request - Client request error"""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(400, code, message, details)


class InternalServerErrorException(AppBaseException):
    """500 Internal Server Error"""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(500, code, message, details)


# ==================== Business Exceptions ====================


# Event generation contract violations
class InvalidGeneratorStateError(InternalServerErrorException):
    """An event generator was used after it had been completed"""

    def __init__(
        self,
        message: str = "Cannot process content after the generator has "
        "been completed.",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__("INVALID_GENERATOR_STATE", message, details)


class UnsupportedContentError(InternalServerErrorException):
    """Content was routed to a generator that does not support it"""

    def __init__(
        self,
        generator_name: str,
        content_type: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"{generator_name} does not support content of type "
            f"'{content_type}'."
        )
        super().__init__("UNSUPPORTED_CONTENT", message, details)


# Request side conversion errors
class ContentConversionError(BadRequestException):
    """Content that is categorically invalid in the requested direction"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__("INVALID_CONTENT", message, details)


class MalformedIdentifierError(BadRequestException, ValueError):
    """An identifier does not carry a valid partition key"""

    def __init__(
        self,
        identifier: Optional[str],
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"Id '{identifier}' does not contain a valid id."
        self.identifier = identifier
        super().__init__("INVALID_ID", message, details)


class InvalidRequestException(BadRequestException):
    """The request body could not be parsed or validated"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__("INVALID_REQUEST", message, details)


# Agent invocation
class AgentInvocationException(InternalServerErrorException):
    """
    Raised when the underlying agent fails while generating a response.

    The attached ``error`` is what the API surfaces to the caller.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        error: Optional[ResponseError] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        if error is None:
            error = ResponseError(
                code="server_error",
                message=message or "Agent invocation failed",
            )
        self.error = error
        super().__init__(error.code, error.message, details)

    @classmethod
    def wrap(cls, exc: BaseException) -> "AgentInvocationException":
        """Wrap an arbitrary failure, keeping existing invocation errors."""
        if isinstance(exc, AgentInvocationException):
            return exc
        wrapped = cls(
            error=ResponseError(code="server_error", message=str(exc)),
        )
        wrapped.__cause__ = exc
        return wrapped
