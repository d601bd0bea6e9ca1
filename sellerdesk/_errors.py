"""
Checkout errors — one taxonomy for every collaborator-facing operation.

Pure computation (phone normalization, money) never fails.
Everything touching I/O returns Result[T, CheckoutError].
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


# ═══════════════════════════════════════════════════════════════════════════════
# Error Kind
# ═══════════════════════════════════════════════════════════════════════════════


class ErrorKind(Enum):
    """
    Kinds of checkout errors.

    VALIDATION: required field missing. Blocks forward progress.
    LOOKUP_MISS: nothing found (no draft, no quote). Degrades, never blocks.
    WRITE_FAILURE: backend rejected insert/update. Blocks, nothing committed.
    RENDER_FAILURE: invoice render failed after the order was written. Warning only.
    COLLABORATOR_UNAVAILABLE: external API absent or failing. Degrades to manual entry.
    """

    VALIDATION = auto()
    LOOKUP_MISS = auto()
    WRITE_FAILURE = auto()
    RENDER_FAILURE = auto()
    COLLABORATOR_UNAVAILABLE = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# Checkout Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutError:
    """
    Classified checkout error.

    field: name of the offending form field (VALIDATION only).
    cause: the collaborator exception this error was classified from.
    """

    kind: ErrorKind
    message: str
    field: str | None = None
    cause: Exception | None = None

    @property
    def blocking(self) -> bool:
        """Whether the user must fix something before continuing."""
        return self.kind in (ErrorKind.VALIDATION, ErrorKind.WRITE_FAILURE)

    def __str__(self) -> str:
        return self.message


class Errors:
    @staticmethod
    def missing(field: str, message: str) -> CheckoutError:
        return CheckoutError(ErrorKind.VALIDATION, message, field=field)

    @staticmethod
    def invalid(field: str, message: str) -> CheckoutError:
        return CheckoutError(ErrorKind.VALIDATION, message, field=field)

    @staticmethod
    def not_found(message: str) -> CheckoutError:
        return CheckoutError(ErrorKind.LOOKUP_MISS, message)

    @staticmethod
    def write_failed(action: str, cause: Exception | None = None) -> CheckoutError:
        detail = f": {cause}" if cause is not None else ""
        return CheckoutError(ErrorKind.WRITE_FAILURE, f"Failed to {action}{detail}", cause=cause)

    @staticmethod
    def render_failed(cause: Exception | None = None) -> CheckoutError:
        detail = f": {cause}" if cause is not None else ""
        return CheckoutError(
            ErrorKind.RENDER_FAILURE,
            f"Order saved, but the invoice could not be rendered{detail}",
            cause=cause,
        )

    @staticmethod
    def unavailable(collaborator: str, cause: Exception | None = None) -> CheckoutError:
        detail = f": {cause}" if cause is not None else ""
        return CheckoutError(
            ErrorKind.COLLABORATOR_UNAVAILABLE,
            f"{collaborator} unavailable{detail}",
            cause=cause,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "ErrorKind",
    "CheckoutError",
    "Errors",
)
