"""
Error taxonomy for B3trRound operations.

Every error carries the operation that failed and, when relevant, the
round / app identifiers involved, so the CLI can print a self-contained
message before exiting with ``exit_code``.
"""

from __future__ import annotations

from typing import Optional


class B3trRoundError(RuntimeError):
    exit_code: int = 1

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        round_id: Optional[int] = None,
        app_id: Optional[str] = None,
    ) -> None:
        self.message = message
        self.operation = operation
        self.round_id = round_id
        self.app_id = app_id
        super().__init__(self._render())

    def _render(self) -> str:
        context = []
        if self.operation:
            context.append(f"operation={self.operation}")
        if self.round_id is not None:
            context.append(f"round={self.round_id}")
        if self.app_id is not None:
            context.append(f"app={self.app_id}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class ConfigurationError(B3trRoundError):
    """Unknown network, missing address or missing credentials."""

    exit_code = 2


class RemoteReadError(B3trRoundError):
    """A read-only call failed before any state change."""

    exit_code = 3


class RemoteWriteError(B3trRoundError):
    """A transaction could not be submitted or was never confirmed."""

    exit_code = 4


class TransactionRevertedError(B3trRoundError):
    """A transaction was included in a block but reverted."""

    exit_code = 5

    def __init__(self, message: str, *, tx_hash: str, **context) -> None:
        self.tx_hash = tx_hash
        super().__init__(message, **context)

    def _render(self) -> str:
        return f"{super()._render()} [tx {self.tx_hash}]"
