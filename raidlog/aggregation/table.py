"""
Sparse statistic tables produced by accumulators.
"""

from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple

Key = Tuple[Any, ...]


def _freeze_value(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(_freeze_value(v) for v in value)
    if isinstance(value, dict):
        return MappingProxyType({k: _freeze_value(v) for k, v in value.items()})
    return value


def _plain_value(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return [_plain_value(v) for v in value]
    if isinstance(value, Mapping):
        return {k: _plain_value(v) for k, v in value.items()}
    return value


class StatTable:
    """
    Sparse map from a key tuple to a record of value fields.

    Entries are created on first write through ``entry`` and updated in
    place afterwards. After ``freeze`` the table is read-only.
    """

    def __init__(self, key_dimensions: Tuple[str, ...], value_fields: Tuple[str, ...],
                 factory: Optional[Callable[[], Dict[str, Any]]] = None):
        self.key_dimensions = tuple(key_dimensions)
        self.value_fields = tuple(value_fields)
        self._factory = factory or dict
        self._entries: Dict[Key, Any] = {}
        self.frozen = False

    def entry(self, *key) -> Dict[str, Any]:
        """
        Get the record for a key, creating it on first write.

        Args:
            *key: One value per key dimension

        Returns:
            Mutable record dictionary
        """
        if self.frozen:
            raise TypeError("StatTable is frozen")
        if len(key) != len(self.key_dimensions):
            raise KeyError(f"Expected {len(self.key_dimensions)} key parts, got {key!r}")
        record = self._entries.get(key)
        if record is None:
            record = self._factory()
            self._entries[key] = record
        return record

    def freeze(self) -> "StatTable":
        if not self.frozen:
            self._entries = {key: _freeze_value(record) for key, record in self._entries.items()}
            self.frozen = True
        return self

    def get(self, key: Key, default=None):
        return self._entries.get(tuple(key), default)

    def __getitem__(self, key: Key):
        return self._entries[tuple(key)]

    def __contains__(self, key) -> bool:
        return tuple(key) in self._entries

    def __iter__(self) -> Iterator[Key]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self):
        return self._entries.keys()

    def items(self):
        return self._entries.items()

    def __eq__(self, other) -> bool:
        if not isinstance(other, StatTable):
            return NotImplemented
        return (
            self.key_dimensions == other.key_dimensions
            and self.value_fields == other.value_fields
            and self._entries == other._entries
        )

    def select(self, **criteria) -> Dict[Key, Any]:
        """
        Filter entries by key dimension values.

        Example:
            damage_table.select(target="0xF130003EB0000001")

        Returns:
            Dictionary of matching key -> record
        """
        positions = {}
        for name, value in criteria.items():
            if name not in self.key_dimensions:
                raise KeyError(f"Unknown key dimension: {name}")
            positions[self.key_dimensions.index(name)] = value
        return {
            key: record
            for key, record in self._entries.items()
            if all(key[pos] == value for pos, value in positions.items())
        }

    def to_rows(self) -> List[Dict[str, Any]]:
        """Flatten to one dictionary per entry, key dimensions first."""
        rows = []
        for key, record in self._entries.items():
            row = dict(zip(self.key_dimensions, key))
            row.update({name: _plain_value(value) for name, value in record.items()})
            rows.append(row)
        return rows

    def __repr__(self) -> str:
        state = "frozen" if self.frozen else "open"
        return f"StatTable({', '.join(self.key_dimensions)}: {len(self)} entries, {state})"
