"""Error kinds, error codes and exceptions raised by the parser client."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus
from typing import Any, Dict, List, Optional


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    API_REQUEST = "api_request"


@dataclass(frozen=True)
class ErrorCode:
    code: str
    status: HTTPStatus
    message: str

    def as_dict(self, detail: Optional[str] = None) -> Dict[str, Any]:
        return {
            "status": "failure",
            "error_code": self.code,
            "error_status": self.status.value,
            "message": detail or self.message,
        }


ERRORS: Dict[ErrorKind, ErrorCode] = {
    ErrorKind.CONFIGURATION: ErrorCode(
        code="ERR_CONFIGURATION",
        status=HTTPStatus.INTERNAL_SERVER_ERROR,
        message="Dolphin Parser client is not configured",
    ),
    ErrorKind.API_REQUEST: ErrorCode(
        code="ERR_API_REQUEST",
        status=HTTPStatus.BAD_GATEWAY,
        message="Dolphin Parser API request failed",
    ),
}


def get_error(kind: ErrorKind) -> ErrorCode:
    return ERRORS[kind]


class DolphinParserError(Exception):
    """Base error carrying its kind and, when available, the raw API payload."""

    kind: ErrorKind = ErrorKind.API_REQUEST

    def __init__(self, message: str = "", *, response: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.response = response

    @property
    def error(self) -> ErrorCode:
        return get_error(self.kind)

    def to_response(self) -> Dict[str, Any]:
        payload = self.error.as_dict(self.message)
        if self.response is not None:
            payload["context"] = {"response": self.response}
        return payload


class ConfigurationError(DolphinParserError):
    """Raised at client construction when a required setting is empty."""

    kind = ErrorKind.CONFIGURATION

    @classmethod
    def missing_endpoint(cls) -> "ConfigurationError":
        return cls(
            "Dolphin Parser endpoint is not configured. "
            "Set DOLPHIN_PARSER_ENDPOINT in your environment or .env file."
        )

    @classmethod
    def missing_api_key(cls) -> "ConfigurationError":
        return cls(
            "Dolphin Parser API key is not configured. "
            "Set DOLPHIN_PARSER_API_KEY in your environment or .env file."
        )

    @classmethod
    def unknown_options(cls, names: List[str]) -> "ConfigurationError":
        return cls(f"Unknown Dolphin Parser option(s): {', '.join(names)}.")

    @classmethod
    def unknown_disk(cls, name: str) -> "ConfigurationError":
        return cls(f"Unknown storage disk '{name}'. Set DOLPHIN_PARSER_STORAGE_DISK to 'local' or 'minio'.")


class ApiRequestError(DolphinParserError):
    """Raised on a non-success HTTP status or an unmet request precondition."""

    kind = ErrorKind.API_REQUEST

    @classmethod
    def request_failed(cls, message: str, response: Any = None) -> "ApiRequestError":
        return cls(f"API request failed: {message}", response=response)
