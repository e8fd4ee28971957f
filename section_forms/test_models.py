"""
Unit tests for the section data model.
"""

import pytest
from section_forms.models import (
    Catalog, CatalogItem, Section, SectionConfig, SectionFields,
    Verdict, VerdictStatus
)
from section_forms.sections import FILMS


def make_config(**overrides):
    values = dict(
        section_id='s1',
        title='Section 1',
        catalog=FILMS,
        selection_noun='film',
        empty_note_message='Text field is required',
    )
    values.update(overrides)
    return SectionConfig(**values)


class TestCatalog:
    def test_empty_catalog_rejected(self):
        with pytest.raises(ValueError):
            Catalog([])

    def test_non_item_rejected(self):
        with pytest.raises(TypeError):
            Catalog([{'title': 'x', 'year': 1}])

    def test_find_returns_first_duplicate(self):
        first = CatalogItem('Dup', 2000)
        catalog = Catalog([first, CatalogItem('Dup', 2001)])
        assert catalog.find('Dup') is first

    def test_find_missing(self):
        assert FILMS.find('Casablanca') is None

    def test_from_entries(self):
        catalog = Catalog.from_entries([{'title': 'A', 'year': 1999}])
        assert catalog[0] == CatalogItem('A', 1999)
        assert len(catalog) == 1

    def test_items_are_immutable(self):
        item = FILMS[0]
        with pytest.raises(AttributeError):
            item.title = 'Changed'

    @pytest.mark.parametrize('title,year', [(None, 1990), ('A', '1990'), ('A', True)])
    def test_item_types_checked(self, title, year):
        with pytest.raises(TypeError):
            CatalogItem(title, year)


class TestSectionFields:
    def test_defaults(self):
        fields = SectionFields()
        assert fields.selection is None
        assert fields.note == ''
        assert fields.acknowledged is False

    def test_non_string_note_rejected(self):
        with pytest.raises(TypeError):
            SectionFields(note=None)

    def test_non_bool_acknowledged_rejected(self):
        with pytest.raises(TypeError):
            SectionFields(acknowledged='yes')


class TestVerdict:
    def test_invalid_needs_problems(self):
        with pytest.raises(ValueError):
            Verdict.invalid([])

    def test_valid_cannot_carry_problems(self):
        with pytest.raises(ValueError):
            Verdict(VerdictStatus.VALID, ('x',))

    def test_message(self):
        verdict = Verdict.invalid(['Please choose a film', 'You must check the box'])
        assert verdict.message == 'Please choose a film. You must check the box'
        assert Verdict.valid().message is None
        assert Verdict.unevaluated().message is None

    def test_dict_round_trip(self):
        verdict = Verdict.invalid(['One'])
        assert Verdict.from_dict(verdict.to_dict()) == verdict


class TestSection:
    def test_initial_state(self):
        section = Section(make_config())
        assert section.fields == SectionFields()
        assert section.verdict.status is VerdictStatus.UNEVALUATED

    def test_select_by_title(self):
        section = Section(make_config())
        section.select('The Godfather')
        assert section.fields.selection == CatalogItem('The Godfather', 1972)

    def test_select_unknown_title_leaves_fields_untouched(self):
        section = Section(make_config())
        section.select('The Godfather')
        with pytest.raises(ValueError):
            section.select('Casablanca')
        assert section.fields.selection.title == 'The Godfather'

    @pytest.mark.parametrize('title', [None, ''])
    def test_select_clears(self, title):
        section = Section(make_config())
        section.select('The Godfather')
        section.select(title)
        assert section.fields.selection is None

    def test_setters_check_types(self):
        section = Section(make_config())
        with pytest.raises(TypeError):
            section.set_note(123)
        with pytest.raises(TypeError):
            section.set_acknowledged('on')

    def test_field_changes_keep_verdict(self):
        section = Section(make_config())
        section.verdict = Verdict.valid()
        section.set_note('changed!')
        section.set_acknowledged(False)
        assert section.verdict.is_valid

    def test_sections_do_not_share_fields(self):
        first = Section(make_config())
        second = Section(make_config(section_id='s2', title='Section 2'))
        first.set_note('only here')
        assert second.fields.note == ''

    def test_config_requires_noun(self):
        with pytest.raises(ValueError):
            make_config(selection_noun='')
