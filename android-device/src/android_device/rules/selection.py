"""Pick the single element of a sequence that matches a predicate."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Iterable, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Found(Generic[T]):
    item: T


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class Ambiguous(Generic[T]):
    matches: tuple[T, ...]

    @property
    def count(self) -> int:
        return len(self.matches)


Selection = Union[Found[T], NotFound, Ambiguous[T]]


def select_single(items: Iterable[T], predicate: Callable[[T], bool]) -> Selection[T]:
    matches = tuple(item for item in items if predicate(item))
    if not matches:
        return NotFound()
    if len(matches) > 1:
        return Ambiguous(matches)
    return Found(matches[0])
