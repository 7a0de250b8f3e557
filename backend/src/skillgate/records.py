"""
Indexed-record extraction.

Trial forms post repeated structures as flat keys such as ``entry_0_name`` or
``org_3_company``. This module regroups them into ordered records so the
category validators never parse key strings themselves.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class IndexedRecord:
    """One logical record recovered from a flat payload."""
    index: int
    fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def position(self) -> int:
        """1-based position, as shown to workers."""
        return self.index + 1

    @property
    def fields_with_content(self) -> int:
        return sum(1 for value in self.fields.values() if has_content(value))

    def text(self, name: str) -> str:
        """Trimmed string value of a field, '' when missing or not text."""
        value = self.fields.get(name)
        return value.strip() if isinstance(value, str) else ''


def has_content(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def extract_records(payload: Dict[str, Any], kind: str) -> List[IndexedRecord]:
    """
    Group ``<kind>_<index>_<field>`` keys into records.

    Records come back in index order. An index whose fields are all blank
    (or that has no keys at all) is skipped, since workers are not required
    to fill every slot.
    """
    pattern = re.compile(r'^{}_(\d+)_(.+)$'.format(re.escape(kind)))

    grouped: Dict[int, Dict[str, Any]] = {}
    for key, value in payload.items():
        match = pattern.match(str(key))
        if not match:
            continue
        index = int(match.group(1))
        grouped.setdefault(index, {})[match.group(2)] = value

    records = []
    for index in sorted(grouped):
        record = IndexedRecord(index=index, fields=grouped[index])
        if record.fields_with_content > 0:
            records.append(record)
    return records
