"""
Data model for the two-section validation form.

Each section owns its fields and its verdict exclusively. Catalogs and
section configuration are immutable and may be shared freely.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple


PROBLEM_SEPARATOR = '. '


class UnknownSectionError(KeyError):
    """Raised when a section id is not configured."""


@dataclass(frozen=True)
class CatalogItem:
    """One selectable option."""
    title: str
    year: int

    def __post_init__(self):
        if not isinstance(self.title, str):
            raise TypeError(f'Catalog title must be a string, got {type(self.title).__name__}')
        if isinstance(self.year, bool) or not isinstance(self.year, int):
            raise TypeError(f'Catalog year must be an integer, got {type(self.year).__name__}')

    def to_dict(self) -> Dict[str, Any]:
        return {'title': self.title, 'year': self.year}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CatalogItem':
        return cls(title=data['title'], year=data['year'])


class Catalog:
    """
    Immutable ordered sequence of catalog items.

    Titles are the display and comparison key. Duplicate titles are allowed;
    lookups resolve to the first match.
    """

    def __init__(self, items: Iterable[CatalogItem]):
        items = tuple(items)
        if not items:
            raise ValueError('Catalog must contain at least one item')
        for item in items:
            if not isinstance(item, CatalogItem):
                raise TypeError(f'Catalog entries must be CatalogItem, got {type(item).__name__}')
        self._items = items

    @classmethod
    def from_entries(cls, entries: Iterable[Dict[str, Any]]) -> 'Catalog':
        """Build a catalog from plain ``{'title': ..., 'year': ...}`` mappings."""
        return cls(CatalogItem.from_dict(entry) for entry in entries)

    @property
    def items(self) -> Tuple[CatalogItem, ...]:
        return self._items

    def find(self, title: str) -> Optional[CatalogItem]:
        for item in self._items:
            if item.title == title:
                return item
        return None

    def titles(self) -> Tuple[str, ...]:
        return tuple(item.title for item in self._items)

    def to_list(self):
        return [item.to_dict() for item in self._items]

    def __iter__(self) -> Iterator[CatalogItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index):
        return self._items[index]

    def __contains__(self, item) -> bool:
        return item in self._items

    def __eq__(self, other):
        if not isinstance(other, Catalog):
            return NotImplemented
        return self._items == other._items

    def __hash__(self):
        return hash(self._items)

    def __repr__(self):
        return f'<Catalog {len(self._items)} items>'


@dataclass
class SectionFields:
    """Mutable input state of one section."""
    selection: Optional[CatalogItem] = None
    note: str = ''
    acknowledged: bool = False

    def __post_init__(self):
        if self.selection is not None and not isinstance(self.selection, CatalogItem):
            raise TypeError('selection must be a CatalogItem or None')
        if not isinstance(self.note, str):
            raise TypeError(f'note must be a string, got {type(self.note).__name__}')
        if not isinstance(self.acknowledged, bool):
            raise TypeError(f'acknowledged must be a bool, got {type(self.acknowledged).__name__}')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'selection': self.selection.to_dict() if self.selection else None,
            'note': self.note,
            'acknowledged': self.acknowledged,
        }


class VerdictStatus(Enum):
    """Validation outcome states."""
    UNEVALUATED = 'unevaluated'
    INVALID = 'invalid'
    VALID = 'valid'


@dataclass(frozen=True)
class Verdict:
    """
    Result of the last validation of a section.

    Only ``Invalid`` carries problems, and it always carries at least one.
    """
    status: VerdictStatus
    problems: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'problems', tuple(self.problems))
        if self.status is VerdictStatus.INVALID and not self.problems:
            raise ValueError('An invalid verdict needs at least one problem')
        if self.status is not VerdictStatus.INVALID and self.problems:
            raise ValueError(f'A {self.status.value} verdict cannot carry problems')

    @classmethod
    def unevaluated(cls) -> 'Verdict':
        return cls(VerdictStatus.UNEVALUATED)

    @classmethod
    def valid(cls) -> 'Verdict':
        return cls(VerdictStatus.VALID)

    @classmethod
    def invalid(cls, problems: Iterable[str]) -> 'Verdict':
        return cls(VerdictStatus.INVALID, tuple(problems))

    @property
    def is_valid(self) -> bool:
        return self.status is VerdictStatus.VALID

    @property
    def is_invalid(self) -> bool:
        return self.status is VerdictStatus.INVALID

    @property
    def message(self) -> Optional[str]:
        """Problems joined for display, or None unless invalid."""
        if not self.is_invalid:
            return None
        return PROBLEM_SEPARATOR.join(self.problems)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'problems': list(self.problems),
            'message': self.message,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Verdict':
        return cls(VerdictStatus(data['status']), tuple(data.get('problems') or ()))


@dataclass(frozen=True)
class SectionConfig:
    """Immutable per-section configuration, injected at construction."""
    section_id: str
    title: str
    catalog: Catalog
    selection_noun: str
    empty_note_message: str

    def __post_init__(self):
        if not isinstance(self.catalog, Catalog):
            raise TypeError('catalog must be a Catalog')
        if not self.selection_noun:
            raise ValueError(f'Section {self.section_id} needs a selection noun')
        if not self.empty_note_message:
            raise ValueError(f'Section {self.section_id} needs an empty-note message')


@dataclass
class Section:
    """
    One data-entry section.

    ``fields`` is mutated by the caller through the setters below. ``verdict``
    is written only by the controller.
    """
    config: SectionConfig
    fields: SectionFields = field(default_factory=SectionFields)
    verdict: Verdict = field(default_factory=Verdict.unevaluated)

    @property
    def section_id(self) -> str:
        return self.config.section_id

    def select(self, title: Optional[str]):
        """
        Choose a catalog item by title. ``None`` or an empty title clears it.

        Raises:
            ValueError: if the title is not in this section's catalog
        """
        if title is None or title == '':
            self.fields.selection = None
            return
        if not isinstance(title, str):
            raise TypeError(f'selection title must be a string, got {type(title).__name__}')
        item = self.config.catalog.find(title)
        if item is None:
            raise ValueError(f'"{title}" is not a valid {self.config.selection_noun}')
        self.fields.selection = item

    def set_note(self, note: str):
        if not isinstance(note, str):
            raise TypeError(f'note must be a string, got {type(note).__name__}')
        self.fields.note = note

    def set_acknowledged(self, acknowledged: bool):
        if not isinstance(acknowledged, bool):
            raise TypeError(f'acknowledged must be a bool, got {type(acknowledged).__name__}')
        self.fields.acknowledged = acknowledged

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.section_id,
            'title': self.config.title,
            'selection_noun': self.config.selection_noun,
            'fields': self.fields.to_dict(),
            'verdict': self.verdict.to_dict(),
        }

    def __repr__(self):
        return f'<Section {self.section_id} - {self.verdict.status.value}>'
