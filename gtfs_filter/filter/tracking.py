"""Change tracking for entity collections."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


def format_count(number: int) -> str:
    """Format a count, abbreviating large numbers.

    100,000,000 and above are shown in millions with a ``"`` suffix,
    100,000 and above in thousands with a ``'`` suffix.
    """
    if number >= 100_000_000:
        return f"{number // 1_000_000:,}\""
    if number >= 100_000:
        return f"{number // 1_000:,}'"
    return f"{number:,}"


@dataclass(frozen=True)
class SizeChange:
    """Size of a collection at the previous checkpoint and now."""

    name: str
    before: int
    after: int

    @property
    def removed(self) -> int:
        return self.before - self.after

    def __str__(self) -> str:
        return (
            f"  - {self.name:<14}: {format_count(self.removed)} of "
            f"{format_count(self.before)} => {format_count(self.after)}"
        )


class TrackedSet(set, Generic[T]):
    """Set that remembers its size at the last checkpoint."""

    def __init__(self, name: str, items: Iterable[T] = ()) -> None:
        super().__init__(items)
        self.name = name
        self._checkpoint_size = 0

    def reset_change_tracking(self) -> None:
        """Take the current size as the new checkpoint."""
        self._checkpoint_size = len(self)

    def checkpoint(self) -> SizeChange | None:
        """Compare with the last checkpoint and move the checkpoint forward.

        Returns None when the size is unchanged.
        """
        size = len(self)
        if size == self._checkpoint_size:
            return None
        change = SizeChange(self.name, self._checkpoint_size, size)
        self._checkpoint_size = size
        return change

    def remove_if(self, predicate: Callable[[T], bool]) -> int:
        """Remove every member matching the predicate, return how many."""
        doomed = [item for item in self if predicate(item)]
        self.difference_update(doomed)
        return len(doomed)
