"""Storage-agnostic search filters."""

from __future__ import annotations

import operator
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from fastapi_reverselog.exceptions import InvalidFilterError

OPERATORS: MappingProxyType[str, Callable[[Any, Any], bool]] = (
    MappingProxyType(
        {
            "=": operator.eq,
            "!=": operator.ne,
            "<": operator.lt,
            "<=": operator.le,
            ">": operator.gt,
            ">=": operator.ge,
        }
    )
)


@dataclass(frozen=True)
class SearchWhere:
    """Single ``field operator value`` predicate."""

    field: str
    operator: str
    value: Any

    def __post_init__(self) -> None:
        if not self.field:
            raise InvalidFilterError("Search field must not be empty")
        if self.operator not in OPERATORS:
            raise InvalidFilterError(
                f"Unsupported operator {self.operator!r} "
                f"for field {self.field!r}"
            )

    def matches(self, item: Any) -> bool:
        """Evaluate the predicate against an attribute of ``item``."""
        try:
            current = getattr(item, self.field)
        except AttributeError as e:
            raise InvalidFilterError(f"Unknown field {self.field!r}") from e
        return OPERATORS[self.operator](current, self.value)


@dataclass(frozen=True)
class Search:
    """Conjunction of predicates with an optional pagination window."""

    where: tuple[SearchWhere, ...] = field(default_factory=tuple)
    offset: int = 0
    limit: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "where", tuple(self.where))
        if self.offset < 0:
            raise InvalidFilterError("Search offset must not be negative")
        if self.limit is not None and self.limit <= 0:
            raise InvalidFilterError("Search limit must be positive")

    @classmethod
    def build(
        cls,
        *conditions: tuple[str, str, Any],
        offset: int = 0,
        limit: int | None = None,
    ) -> Search:
        """Build a search from ``(field, operator, value)`` tuples."""
        return cls(
            where=tuple(SearchWhere(*c) for c in conditions),
            offset=offset,
            limit=limit,
        )

    def matches(self, item: Any) -> bool:
        return all(w.matches(item) for w in self.where)

    def apply(self, items: Sequence[Any]) -> list[Any]:
        """Filter and window an in-memory sequence.

        ``items`` must already be in a stable order for the window to
        paginate consistently.
        """
        matched = [item for item in items if self.matches(item)]
        end = None if self.limit is None else self.offset + self.limit
        return matched[self.offset : end]
