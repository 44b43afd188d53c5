from __future__ import annotations

from dataclasses import dataclass

from .exit_codes import ERR_CONFIG, ERR_INTERNAL, ERR_VALIDATION


@dataclass
class CertctlError(Exception):
    message: str
    code: int = ERR_INTERNAL
    kind: str = "generic_error"

    def __str__(self) -> str:
        return self.message


class ConfigError(CertctlError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ERR_CONFIG, "config_error")


class LabelExpressionError(CertctlError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ERR_CONFIG, "label_expression_error")


class CatalogError(CertctlError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ERR_VALIDATION, "catalog_error")


class DuplicateCheckError(CatalogError):
    pass


class UnknownCheckError(CatalogError):
    pass


class InvalidTransitionError(CertctlError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ERR_INTERNAL, "invalid_transition")


class ReportValidationError(CertctlError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ERR_VALIDATION, "validation_error")


class CheckSkipped(Exception):
    """Raised by ``Check.skip`` to end a check body as skipped."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class CheckAborted(Exception):
    """Raised by ``Check.abort`` to stop the whole run."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


__all__ = [
    "CatalogError",
    "CertctlError",
    "CheckAborted",
    "CheckSkipped",
    "ConfigError",
    "DuplicateCheckError",
    "InvalidTransitionError",
    "LabelExpressionError",
    "ReportValidationError",
    "UnknownCheckError",
]
