"""
Effect records produced by the pure state transitions.

A transition never touches storage. It returns the next state plus the
storage calls the caller must perform. The caller performs each effect,
waits for it to resolve, and only then applies the follow-up transition
(record_entry, drop_entry, write_through). A failed effect means no
follow-up is applied, so in-memory state never runs ahead of the store.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

from cardtracker.models.pending import PendingDraft


@dataclass(frozen=True, slots=True)
class AppendPending:
    """Write one new ledger row."""

    draft: PendingDraft


@dataclass(frozen=True, slots=True)
class DeletePending:
    """Delete one ledger row by id."""

    entry_id: int


@dataclass(frozen=True, slots=True)
class ClearPending:
    """Wipe the ledger in a single operation."""


Effect = AppendPending | DeletePending | ClearPending

S = TypeVar("S")


@dataclass(frozen=True, slots=True)
class Transition(Generic[S]):
    """Next state plus the effects still to perform."""

    state: S
    effects: tuple[Effect, ...] = ()
