"""
Field Lock Subsystem.

A lock holds a sticky value for one capture attribute so the next
browse-mode capture opens pre-filled with it.

INVARIANTS:
- Five independent slots: parallel, grade, location, price_bucket, status
- Locks are read and written by the browse capture path only
- Locks live for the lifetime of the running tracker and are never persisted
- After a successful browse capture every locked slot takes the value the
  user actually confirmed, so a lock follows deliberate changes
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum


class LockField(str, Enum):
    """Attributes that can be locked."""

    PARALLEL = "parallel"
    GRADE = "grade"
    LOCATION = "location"
    PRICE_BUCKET = "price_bucket"
    STATUS = "status"


@dataclass(frozen=True, slots=True)
class FieldLock:
    """A locked slot. An empty value is a valid lock ("keep this blank")."""

    value: str


@dataclass(frozen=True, slots=True)
class FieldLocks:
    """
    Immutable lock state. Every operation returns a new instance.

    Usage:
        locks = FieldLocks().toggle(LockField.LOCATION, "Box A")
        locks.resolve_initial(LockField.LOCATION, "")  # -> "Box A"
    """

    locked: Mapping[LockField, FieldLock] = field(default_factory=dict)

    def is_locked(self, lock_field: LockField) -> bool:
        return lock_field in self.locked

    def locked_value(self, lock_field: LockField) -> str | None:
        lock = self.locked.get(lock_field)
        return lock.value if lock is not None else None

    @property
    def any_locked(self) -> bool:
        return bool(self.locked)

    def toggle(self, lock_field: LockField, current_value: str | None) -> "FieldLocks":
        """
        Lock the field to current_value, or clear it if already locked.
        """
        locked = dict(self.locked)
        if lock_field in locked:
            del locked[lock_field]
        else:
            locked[lock_field] = FieldLock(value=current_value or "")
        return FieldLocks(locked=locked)

    def resolve_initial(self, lock_field: LockField, catalog_default: str) -> str:
        """The locked value when locked, otherwise catalog_default."""
        lock = self.locked.get(lock_field)
        return lock.value if lock is not None else catalog_default

    def unlock_all(self) -> "FieldLocks":
        return FieldLocks()

    def write_through(self, confirmed: Mapping[LockField, str]) -> "FieldLocks":
        """
        Refresh every locked slot with the value confirmed in a capture.

        Unlocked slots stay unlocked.
        """
        if not self.locked:
            return self
        return FieldLocks(
            locked={
                lock_field: FieldLock(value=confirmed.get(lock_field, "") or "")
                for lock_field in self.locked
            }
        )

    def as_dict(self) -> dict[str, str | None]:
        """Lock state keyed by field name, None for unlocked slots."""
        return {f.value: self.locked_value(f) for f in LockField}
