"""
Registries of pluggable components selected by identifier code.

Parsers, reporters and history providers each expose a stable
``identifier``. A Registry is built explicitly by whoever composes the
CLI and passed along, so there is no process-wide plugin state.
"""

from __future__ import annotations

from typing import Generic, Iterable, Iterator, Protocol, TypeVar

from sarb.core.errors import InvalidChoiceError


class Identified(Protocol):
    """Anything selectable by a short identifier code."""

    @property
    def identifier(self) -> str: ...


T = TypeVar("T", bound=Identified)


class Registry(Generic[T]):
    """
    Ordered mapping of identifier code -> implementation.

    The first registered implementation is the default.
    """

    def __init__(self, option: str, items: Iterable[T] = ()) -> None:
        """
        Initialize the registry.

        Args:
            option: Name of the CLI option the code is selected with, used
                in error messages.
            items: Implementations to register, in display order.
        """
        self.option = option
        self._items: dict[str, T] = {}
        for item in items:
            self.register(item)

    def register(self, item: T) -> T:
        """Register an implementation under its identifier."""
        code = item.identifier
        if code in self._items:
            raise ValueError(f"Duplicate {self.option} identifier: {code}")
        self._items[code] = item
        return item

    def get(self, code: str) -> T:
        """
        Get the implementation registered under code.

        Raises:
            InvalidChoiceError: If no implementation uses that code.
        """
        try:
            return self._items[code]
        except KeyError:
            raise InvalidChoiceError(code, self.option, self.codes()) from None

    @property
    def default(self) -> T:
        """Get the first registered implementation."""
        if not self._items:
            raise LookupError(f"No {self.option} implementations registered")
        return next(iter(self._items.values()))

    def codes(self) -> list[str]:
        """List registered identifier codes."""
        return list(self._items.keys())

    def __contains__(self, code: object) -> bool:
        return code in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)
