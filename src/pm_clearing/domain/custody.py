"""Custody accounts and ordered token movements with compensation.

Each market escrows its payment pool and minted outcome tokens under its own
custody account, so pools of different markets never mix.
"""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from src.pm_common.enums import Outcome
from src.pm_common.errors import ExternalTransferError
from src.pm_token.domain.protocol import FungibleToken

logger = logging.getLogger(__name__)

TokenStep = tuple[Callable[[], None], Callable[[], None]]  # (apply, undo)


def custody_account(market_id: str) -> str:
    return f"market:{market_id}"


@dataclass
class TokenSet:
    payment: FungibleToken
    yes: FungibleToken
    no: FungibleToken
    _undo_log: list[Callable[[], None]] | None = field(default=None, repr=False)

    def outcome_token(self, outcome: Outcome) -> FungibleToken:
        return self.yes if outcome is Outcome.YES else self.no

    def apply(self, *steps: TokenStep) -> None:
        """run_token_steps, remembering the undos while a recording is open."""
        run_token_steps(*steps)
        if self._undo_log is not None:
            self._undo_log.extend(undo for _, undo in steps)

    @contextmanager
    def recording(self) -> Iterator[list[Callable[[], None]]]:
        """Collect the undo of every step applied inside the block.

        The caller keeps the list and passes it to revert() if the work the
        movements belong to cannot be committed.
        """
        log: list[Callable[[], None]] = []
        self._undo_log = log
        try:
            yield log
        finally:
            self._undo_log = None

    def revert(self, undo_log: list[Callable[[], None]]) -> None:
        """Undo recorded movements newest first. A rejected undo is logged and skipped."""
        for undo in reversed(undo_log):
            try:
                undo()
            except ExternalTransferError as e:
                logger.error("Token compensation failed: %s", e.message)
        undo_log.clear()


def run_token_steps(*steps: TokenStep) -> None:
    """Apply steps in order. If one is rejected, undo the applied ones in reverse and re-raise."""
    undo_stack: list[Callable[[], None]] = []
    for apply, undo in steps:
        try:
            apply()
        except ExternalTransferError:
            for revert in reversed(undo_stack):
                revert()
            raise
        undo_stack.append(undo)
