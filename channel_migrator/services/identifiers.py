"""New user identifiers.

Destination user ids are random and unrelated to source ids; the only link
between the two is the run report kept by the caller.
"""

from collections.abc import Iterable, Iterator
from typing import Protocol
from uuid import UUID, uuid4


class IdentifierGenerator(Protocol):
    def __call__(self) -> UUID: ...


def random_identifier() -> UUID:
    """Fresh random (version 4) UUID."""
    return uuid4()


class SequenceIdentifierGenerator:
    """Hands out a fixed sequence of ids, for deterministic runs."""

    def __init__(self, ids: Iterable[UUID | str]):
        self._ids: Iterator[UUID | str] = iter(ids)

    def __call__(self) -> UUID:
        try:
            value = next(self._ids)
        except StopIteration:
            raise RuntimeError("Identifier sequence exhausted") from None
        return value if isinstance(value, UUID) else UUID(value)
