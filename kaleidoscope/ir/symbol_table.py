"""
Symbol table for IR emission.

Kaleidoscope has no nested binding forms, so a scope is a flat mapping from
parameter name to the IR value standing for it. The IR generator creates a
fresh scope for each function and drops it when that function is done.
"""

from typing import Dict, Generic, Iterator, List, Optional, TypeVar

V = TypeVar("V")


def levenshtein_distance(s1: str, s2: str) -> int:
    """Calculate edit distance between two strings."""
    if len(s1) < len(s2):
        return levenshtein_distance(s2, s1)

    if len(s2) == 0:
        return len(s1)

    previous_row = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        current_row = [i + 1]
        for j, c2 in enumerate(s2):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


class Scope(Generic[V]):
    """Names visible while emitting one function body."""

    def __init__(self, name: str = ""):
        self.name = name
        self._symbols: Dict[str, V] = {}

    def bind(self, name: str, value: V) -> None:
        """Bind `name`, replacing any earlier binding."""
        self._symbols[name] = value

    def lookup(self, name: str) -> Optional[V]:
        return self._symbols.get(name)

    def clear(self) -> None:
        self._symbols.clear()

    def names(self) -> List[str]:
        return list(self._symbols)

    def __contains__(self, name: str) -> bool:
        return name in self._symbols

    def __iter__(self) -> Iterator[str]:
        return iter(self._symbols)

    def __len__(self) -> int:
        return len(self._symbols)

    def get_similar_names(self, name: str, max_distance: int = 2) -> List[str]:
        """Names in scope close to `name`, nearest first (for error suggestions)."""
        similar_names = []
        for symbol_name in self._symbols:
            distance = levenshtein_distance(name.lower(), symbol_name.lower())
            if distance <= max_distance:
                similar_names.append((symbol_name, distance))

        similar_names.sort(key=lambda x: x[1])
        return [similar for similar, _ in similar_names[:5]]

    def __repr__(self) -> str:
        return f"Scope({self.name!r}, {self.names()!r})"
