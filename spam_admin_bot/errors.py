from __future__ import annotations

from typing import Iterable


class AdminFlowError(Exception):
    """Base class for errors raised by the admin-chat workflow."""


class CorrelationNotFound(AdminFlowError):
    pass


class SuperUserProtected(AdminFlowError):
    def __init__(self, username: str, user_id: int) -> None:
        super().__init__(f"forwarded message is about super-user {username} ({user_id}), ignored")
        self.username = username
        self.user_id = user_id


class MalformedPayload(AdminFlowError, ValueError):
    pass


class ExtractionNotFound(AdminFlowError):
    pass


class TransportError(AdminFlowError):
    pass


class PartialFailure(AdminFlowError):
    """Several independent steps failed; keeps every cause in order."""

    def __init__(self, errors: Iterable[Exception]) -> None:
        self.errors = list(errors)
        # one cause per line, safe to drop into a markdown message
        super().__init__("\n".join(str(err) for err in self.errors))

    @classmethod
    def raise_if_any(cls, errors: list[Exception]) -> None:
        if errors:
            raise cls(errors)


def step_error(message: str, exc: Exception) -> AdminFlowError:
    """Wrap a failed step with context while keeping the original as cause."""
    err = AdminFlowError(f"{message}: {exc}")
    err.__cause__ = exc
    return err


__all__ = [
    "AdminFlowError",
    "CorrelationNotFound",
    "ExtractionNotFound",
    "MalformedPayload",
    "PartialFailure",
    "SuperUserProtected",
    "TransportError",
    "step_error",
]
