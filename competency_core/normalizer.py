"""Map raw competency identifiers onto one canonical key space.

Stored attempts, question banks and report pages have historically spelled
the same competency several ways: snake_case keys, human-readable labels,
hyphenated labels, renamed legacy keys and Arabic labels. Everything that
aggregates or looks up by competency goes through :func:`normalize` first.
"""
from __future__ import annotations

import re
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

_WS_RX = re.compile(r"\s+")


def normalized_form(raw_id: str) -> str:
    """Trim, lowercase, collapse whitespace runs to ``_`` and turn ``-`` into ``_``."""

    clean = str(raw_id or "").strip().lower()
    return _WS_RX.sub("_", clean).replace("-", "_")


class AliasTable:
    """Read-only alias lookup.

    Every alias is registered under its exact trimmed spelling and under its
    normalized form, so ``"Follow-Up Discipline"`` and ``"follow up
    discipline"`` land on the same entry. Canonical keys map to themselves.
    """

    def __init__(self, canonical: Iterable[str], aliases: Optional[Mapping[str, str]] = None):
        table: dict[str, str] = {}
        keys = tuple(canonical)
        for key in keys:
            table[key] = key
        for alias, target in (aliases or {}).items():
            if target not in table:
                raise ValueError(f"alias {alias!r} points at unknown competency {target!r}")
            exact = str(alias).strip()
            table.setdefault(exact, target)
            table.setdefault(normalized_form(exact), target)
        self._canonical = keys
        self._table = MappingProxyType(table)

    @property
    def canonical(self) -> tuple[str, ...]:
        return self._canonical

    def lookup(self, raw_id: str) -> Optional[str]:
        return self._table.get(raw_id)

    def __contains__(self, raw_id: object) -> bool:
        return raw_id in self._table

    def __len__(self) -> int:
        return len(self._table)

    def normalize(self, raw_id: str) -> str:
        clean = str(raw_id or "").strip()
        key = normalized_form(clean)
        hit = self._table.get(clean)
        if hit is None:
            hit = self._table.get(key)
        return hit if hit is not None else key


def default_alias_table() -> AliasTable:
    from .competencies import load_catalog
    return load_catalog().aliases


def normalize(raw_id: str, aliases: Optional[AliasTable] = None) -> str:
    """Resolve ``raw_id`` to its canonical competency key.

    Unknown ids come back as their own normalized form; this never raises.
    """

    table = aliases if aliases is not None else default_alias_table()
    return table.normalize(raw_id)


__all__ = ["AliasTable", "normalize", "normalized_form", "default_alias_table"]
