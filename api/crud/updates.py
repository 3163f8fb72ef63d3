"""
Partial update builder.

Turns the fields a caller actually supplied into `col = $n` assignments and
a matching parameter list. Omitted fields and fields explicitly set to None
are left alone, so an update never nulls out a column nobody mentioned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from .errors import NoFieldsProvided


@dataclass
class UpdateClause:
    assignments: list[str] = field(default_factory=list)
    params: list[Any] = field(default_factory=list)

    @property
    def next_placeholder(self) -> int:
        return len(self.params) + 1

    def set_clause(self, *extra: str) -> str:
        return ", ".join([*self.assignments, *extra])


def build_update(values: Mapping[str, Any], field_order: Sequence[str]) -> UpdateClause:
    """
    Build assignments for every supplied field, in `field_order`.

    Raises ValueError for names outside `field_order` and NoFieldsProvided
    when nothing is left to assign.
    """
    unknown = set(values) - set(field_order)
    if unknown:
        raise ValueError(f"Unknown update fields: {sorted(unknown)}")

    clause = UpdateClause()
    for name in field_order:
        if name not in values or values[name] is None:
            continue
        clause.assignments.append(f"{name} = ${clause.next_placeholder}")
        clause.params.append(values[name])

    if not clause.assignments:
        raise NoFieldsProvided()
    return clause
