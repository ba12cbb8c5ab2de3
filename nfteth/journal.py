"""
nfteth.journal: checkpoints, revert/commit across every deployed contract.

The journal keeps a stack of checkpoints. Each checkpoint records a snapshot of
every registered participant (custody state, certificate registry, fungible
tokens, their event logs). ``commit()`` drops the top checkpoint, keeping the
changes; ``revert()`` restores all participants to the recorded snapshots.

Checkpoints nest: a reentrant call opened inside an outer call gets its own
checkpoint, so if it fails only its effects are undone and the outer call may
continue (or fail and revert everything).

Intended usage
--------------
    j = Journal()
    j.register(token)
    with j.atomic("deposit"):
        ...                         # any exception reverts and re-raises

Participants implement the small :class:`Journaled` protocol.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Protocol, runtime_checkable

from .logging import get_logger

log = get_logger(__name__)


@runtime_checkable
class Journaled(Protocol):
    def snapshot(self) -> Any: ...

    def restore(self, snap: Any) -> None: ...


class Journal:
    def __init__(self) -> None:
        self._participants: List[Journaled] = []
        self._checkpoints: List[Dict[int, Any]] = []

    def register(self, participant: Journaled) -> None:
        if not isinstance(participant, Journaled):
            raise TypeError(f"{type(participant).__name__} does not implement snapshot/restore")
        if any(p is participant for p in self._participants):
            return
        if self._checkpoints:
            raise RuntimeError("cannot register participants inside an open checkpoint")
        self._participants.append(participant)

    def depth(self) -> int:
        return len(self._checkpoints)

    def begin(self) -> int:
        """Open a checkpoint. Returns the new depth marker."""
        self._checkpoints.append({i: p.snapshot() for i, p in enumerate(self._participants)})
        return len(self._checkpoints)

    def commit(self) -> None:
        if not self._checkpoints:
            raise RuntimeError("commit without an open checkpoint")
        self._checkpoints.pop()

    def revert(self) -> None:
        if not self._checkpoints:
            raise RuntimeError("revert without an open checkpoint")
        snaps = self._checkpoints.pop()
        for i, p in enumerate(self._participants):
            p.restore(snaps[i])

    @contextmanager
    def atomic(self, label: str = "call") -> Iterator[int]:
        """Run the body inside a checkpoint; revert and re-raise on any exception."""
        depth = self.begin()
        try:
            yield depth
        except BaseException as e:
            self.revert()
            log.debug("checkpoint_reverted", op=label, depth=depth, error=type(e).__name__)
            raise
        else:
            self.commit()


__all__ = ["Journal", "Journaled"]
