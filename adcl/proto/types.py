"""Runtime value types used by generated message content."""

from dataclasses import dataclass
from typing import Generic, Self, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class Maybe(Generic[T]):
    """An optional value with an explicit presence flag.

    Example:
        share = Maybe.of(1024)
        if share.is_set:
            print(share.value)
    """

    value: T | None = None
    is_set: bool = False

    @classmethod
    def of(cls, value: T) -> Self:
        return cls(value=value, is_set=True)

    def get(self, default: T) -> T:
        if self.is_set and self.value is not None:
            return self.value
        return default

    def clear(self) -> None:
        self.value = None
        self.is_set = False
