"""
Error codes and exceptions raised by the collection core.

Codes are stable, machine-readable identifiers intended for:
- callers deciding whether to resubmit with corrected arguments
- audit logs (`collection.call_rejected`)
- HTTP error bodies

Keep these values stable; consumers may persist them.
"""

from __future__ import annotations


class ErrorCode:
    # Authorization
    NOT_ADMINISTRATOR = "NotAdministrator"
    NOT_TOKEN_OWNER = "NotTokenOwner"

    # Not found
    TOKEN_NON_EXISTENT = "TokenNonExistent"
    GENERATION_NOT_FOUND = "GenerationNotFound"

    # Precondition (entity already in the terminal state for the action)
    GENERATION_ALREADY_LOADED = "GenerationAlreadyLoaded"
    TOKEN_REVEALED = "TokenRevealed"
    GENERATION_NOT_TOGGLEABLE = "GenerationNotToggleable"
    GENERATION_NOT_DIFFERENT = "GenerationNotDifferent"
    GENERATION_NOT_DOWNGRADABLE = "GenerationNotDowngradable"

    # Payment / gating
    INSUFFICIENT_PAYMENT = "InsufficientPayment"
    GENERATION_NOT_ENABLED = "GenerationNotEnabled"
    MINT_CLOSED = "MintClosed"
    SUPPLY_EXCEEDED = "SupplyExceeded"

    INVALID_ARGUMENT = "InvalidArgument"
    REENTRANT_CALL = "ReentrantCall"


class ErrorKind:
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    PRECONDITION = "precondition"
    PAYMENT = "payment"
    INVALID_ARGUMENT = "invalid_argument"
    REENTRANCY = "reentrancy"


class CollectionError(RuntimeError):
    """Base error: the triggering call was rejected and no state changed."""

    code: str = "CollectionError"
    kind: str = ErrorKind.PRECONDITION

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_dict(self) -> dict[str, str]:
        return {"error": self.code, "kind": self.kind, "detail": self.message}


class NotAdministrator(CollectionError):
    code = ErrorCode.NOT_ADMINISTRATOR
    kind = ErrorKind.AUTHORIZATION


class NotTokenOwner(CollectionError):
    code = ErrorCode.NOT_TOKEN_OWNER
    kind = ErrorKind.AUTHORIZATION


class TokenNonExistent(CollectionError):
    code = ErrorCode.TOKEN_NON_EXISTENT
    kind = ErrorKind.NOT_FOUND


class GenerationNotFound(CollectionError):
    code = ErrorCode.GENERATION_NOT_FOUND
    kind = ErrorKind.NOT_FOUND


class GenerationAlreadyLoaded(CollectionError):
    code = ErrorCode.GENERATION_ALREADY_LOADED


class TokenRevealed(CollectionError):
    code = ErrorCode.TOKEN_REVEALED


class GenerationNotToggleable(CollectionError):
    code = ErrorCode.GENERATION_NOT_TOGGLEABLE


class GenerationNotDifferent(CollectionError):
    code = ErrorCode.GENERATION_NOT_DIFFERENT


class GenerationNotDowngradable(CollectionError):
    code = ErrorCode.GENERATION_NOT_DOWNGRADABLE


class InsufficientPayment(CollectionError):
    code = ErrorCode.INSUFFICIENT_PAYMENT
    kind = ErrorKind.PAYMENT


class GenerationNotEnabled(CollectionError):
    code = ErrorCode.GENERATION_NOT_ENABLED
    kind = ErrorKind.PAYMENT


class MintClosed(CollectionError):
    code = ErrorCode.MINT_CLOSED
    kind = ErrorKind.PAYMENT


class SupplyExceeded(CollectionError):
    code = ErrorCode.SUPPLY_EXCEEDED
    kind = ErrorKind.PAYMENT


class InvalidArgument(CollectionError):
    code = ErrorCode.INVALID_ARGUMENT
    kind = ErrorKind.INVALID_ARGUMENT


class ReentrantCall(CollectionError):
    code = ErrorCode.REENTRANT_CALL
    kind = ErrorKind.REENTRANCY


__all__ = [
    "CollectionError",
    "ErrorCode",
    "ErrorKind",
    "GenerationAlreadyLoaded",
    "GenerationNotDifferent",
    "GenerationNotDowngradable",
    "GenerationNotEnabled",
    "GenerationNotFound",
    "GenerationNotToggleable",
    "InsufficientPayment",
    "InvalidArgument",
    "MintClosed",
    "NotAdministrator",
    "NotTokenOwner",
    "ReentrantCall",
    "SupplyExceeded",
    "TokenNonExistent",
    "TokenRevealed",
]
