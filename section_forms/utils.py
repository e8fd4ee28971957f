"""
Display helpers for rendering section state.
"""

from section_forms.models import Section, SectionFields


def format_bool(value: bool) -> str:
    """Render a boolean the way the values panel shows it."""
    return 'true' if value else 'false'


def checkbox_label(acknowledged: bool) -> str:
    return 'Checked' if acknowledged else 'Unchecked'


def describe_fields(fields: SectionFields) -> str:
    """
    One-line summary of the current field values.

    Example:
        checked=false — selected=none — text=""
    """
    selected = fields.selection.title if fields.selection else 'none'
    return f'checked={format_bool(fields.acknowledged)} — selected={selected} — text="{fields.note}"'


def current_values_line(section: Section) -> str:
    return f'{section.config.title}: {describe_fields(section.fields)}'


def success_message(section: Section) -> str:
    return f'{section.config.title} is valid'


def note_label(section: Section) -> str:
    return f'Text for {section.config.title.lower()}'


def selection_label(section: Section) -> str:
    return f'Choose a {section.config.selection_noun}'
