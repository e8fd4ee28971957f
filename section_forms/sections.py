"""
Per-section configuration.

Built once from the application config and shared read-only by every request.
"""

from typing import Any, Dict, List, Mapping

from section_forms.models import Catalog, CatalogItem, SectionConfig
from section_forms.validation import empty_note_message_for


FILMS = Catalog([
    CatalogItem('The Shawshank Redemption', 1994),
    CatalogItem('The Godfather', 1972),
    CatalogItem('The Dark Knight', 2008),
    CatalogItem('12 Angry Men', 1957),
    CatalogItem("Schindler's List", 1993),
])

SEASONS = Catalog([
    CatalogItem('Season 1', 2008),
    CatalogItem('Season 2', 2009),
    CatalogItem('Season 3', 2010),
    CatalogItem('Season 4', 2011),
    CatalogItem('Season 5', 2012),
])

CATALOGS: Dict[str, Catalog] = {
    'films': FILMS,
    'seasons': SEASONS,
}

DEFAULT_SECTION_CATALOGS = {'s1': 'films', 's2': 'seasons'}
DEFAULT_SECTION_NOUNS = {'s1': 'film', 's2': 'Season'}


def resolve_catalog(value: Any) -> Catalog:
    """
    Accept a catalog name, a Catalog, or a list of ``{'title', 'year'}`` entries.

    Raises:
        ValueError: for an unknown catalog name or an empty catalog
    """
    if isinstance(value, Catalog):
        return value
    if isinstance(value, str):
        if value not in CATALOGS:
            raise ValueError(f'Unknown catalog {value!r}; expected one of: {", ".join(CATALOGS)}')
        return CATALOGS[value]
    if value is None:
        raise ValueError('A catalog is required')
    return Catalog.from_entries(value)


def build_section_configs(config: Mapping[str, Any]) -> List[SectionConfig]:
    """
    Build section configs from app config keys.

    Uses ``SECTION_CATALOGS``, ``SECTION_NOUNS`` and ``EMPTY_NOTE_WORDING``.
    Section order follows ``SECTION_CATALOGS``.
    """
    catalogs = config.get('SECTION_CATALOGS') or DEFAULT_SECTION_CATALOGS
    nouns = config.get('SECTION_NOUNS') or DEFAULT_SECTION_NOUNS
    empty_note_message = empty_note_message_for(config.get('EMPTY_NOTE_WORDING', 'text'))

    configs = []
    for number, (section_id, catalog) in enumerate(catalogs.items(), start=1):
        if section_id not in nouns:
            raise ValueError(f'No selection noun configured for section {section_id}')
        configs.append(SectionConfig(
            section_id=section_id,
            title=f'Section {number}',
            catalog=resolve_catalog(catalog),
            selection_noun=nouns[section_id],
            empty_note_message=empty_note_message,
        ))
    return configs
