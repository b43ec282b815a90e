"""Typed failures raised by the ordering core."""

from __future__ import annotations


class CanteenError(Exception):
    """Base class for every failure the core reports to its callers."""


class ValidationError(CanteenError):
    """Bad input shape or range."""


class EmptyCartError(ValidationError):
    pass


class WeakSecret(ValidationError):
    pass


class ItemUnavailable(ValidationError):
    pass


class NotFoundError(CanteenError):
    """Unknown order, item, account or reset request id."""


class RequestNotFound(NotFoundError):
    pass


class StateConflictError(CanteenError):
    """The target exists but its current state forbids the operation."""


class CancellationWindowExpired(StateConflictError):
    pass


class OrderTerminalError(StateConflictError):
    pass


class InvalidSettlementState(StateConflictError):
    pass


class DuplicateError(CanteenError):
    pass


class DuplicateEmail(DuplicateError):
    pass


class AuthorizationError(CanteenError):
    """The acting account's role does not allow the operation."""


class CannotDeleteSelf(AuthorizationError):
    pass


class InvalidCredentials(AuthorizationError):
    pass


class UpstreamError(CanteenError):
    """The recommendation collaborator failed or timed out."""
