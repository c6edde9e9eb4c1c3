"""The accessor contract implemented by generated message content."""

from typing import Protocol, runtime_checkable


class IndexOutOfRange(IndexError):
    """Raised when a positional index is outside [0, pos_len())."""


class ContentError(RuntimeError):
    """Raised when message content does not match its declared layout."""


@runtime_checkable
class ParamAccessor(Protocol):
    """Uniform access to the serialized parameters of a message.

    Generated content classes implement this structurally:

        content = INFContent(sid_str="AAAB", nick_str="NIbob")
        content.positional()      # ["AAAB"]
        content.pos_at(0)         # "AAAB"
        content.named()           # {"NI": "bob"}
        content.named_get("Nick") # ("bob", True)
    """

    def positional(self) -> list[str]:
        """Return all positional tokens in declaration order."""
        ...

    def pos_len(self) -> int:
        """Return the number of positional tokens."""
        ...

    def pos_at(self, i: int) -> str:
        """Return positional token i, raising IndexOutOfRange if there is none."""
        ...

    def named(self) -> dict[str, str]:
        """Return named values keyed by their 2-character token."""
        ...

    def named_get(self, key: str) -> tuple[str, bool]:
        """Look up a named value by canonical flag name, then by overflow key."""
        ...
