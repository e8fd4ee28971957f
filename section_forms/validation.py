"""
Validation rules for a single form section.

Validation Rules Documentation:
===============================

1. SELECTION
   - Required: one item from the section's catalog must be chosen
   - Message names the section's selection noun ("Please choose a film")

2. NOTE
   - Required: must contain something other than whitespace
   - Message wording is configured per deployment
     ("Text field is required" / "Review field is required")

3. NOTE CHARACTERS
   - Only ASCII letters, ASCII digits and whitespace are allowed
   - Whitespace is the browser set: tab, line feed, vertical tab, form feed,
     carriage return, space, no-break space, the Unicode space separators,
     line/paragraph separators and the byte order mark
   - Only checked when the note passed rule 2

4. ACKNOWLEDGMENT
   - The checkbox must be ticked

Problems are always reported in the order above. Sections are validated
independently; there are no cross-section rules.
"""

import re
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from section_forms.models import PROBLEM_SEPARATOR, SectionConfig, SectionFields


@dataclass
class ValidationError:
    """Represents a single validation problem with the field it belongs to."""
    field: str
    message: str
    code: str
    section: str = ''


@dataclass
class ValidationResult:
    """Container for validation results."""
    errors: List[ValidationError] = field(default_factory=list)
    is_valid: bool = True

    def add_error(self, field: str, message: str, code: str = 'invalid', section: str = ''):
        """Add a validation error."""
        self.errors.append(ValidationError(field, message, code, section))
        self.is_valid = False

    def messages(self) -> List[str]:
        return [e.message for e in self.errors]

    def summary(self) -> Optional[str]:
        """Join all problems into the single display string, or None if valid."""
        if self.is_valid:
            return None
        return PROBLEM_SEPARATOR.join(self.messages())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        return {
            'ok': self.is_valid,
            'message': self.summary(),
            'errors': [
                {'field': e.field, 'message': e.message, 'code': e.code, 'section': e.section}
                for e in self.errors
            ]
        }


# Message wording
TEXT_REQUIRED_MESSAGE = 'Text field is required'
REVIEW_REQUIRED_MESSAGE = 'Review field is required'
INVALID_CHARACTERS_MESSAGE = 'Text contains invalid characters (only letters, numbers and spaces allowed)'
NOT_ACKNOWLEDGED_MESSAGE = 'You must check the box'

EMPTY_NOTE_MESSAGES = {
    'text': TEXT_REQUIRED_MESSAGE,
    'review': REVIEW_REQUIRED_MESSAGE,
}

# Constants for validation
MAX_NOTE_LENGTH = 500

# Whitespace as browsers define it for \s and String.prototype.trim
WHITESPACE_CLASS = r'\t\n\v\f\r \u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff'

# Regex patterns
BLANK_NOTE_PATTERN = re.compile(r'[' + WHITESPACE_CLASS + r']*')
ALLOWED_NOTE_PATTERN = re.compile(r'[A-Za-z0-9' + WHITESPACE_CLASS + r']+')


def coerce_to_bool(value: Any) -> Optional[bool]:
    """Coerce checkbox-style inputs to boolean."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in ('true', '1', 'yes', 'on')
    if isinstance(value, int):
        return value == 1
    return None


def missing_selection_message(selection_noun: str) -> str:
    return f'Please choose a {selection_noun}'


def empty_note_message_for(wording: str) -> str:
    """
    Resolve the configured empty-note wording.

    Raises:
        ValueError: for an unknown wording key
    """
    try:
        return EMPTY_NOTE_MESSAGES[wording]
    except KeyError:
        raise ValueError(
            f'Unknown empty-note wording {wording!r}; expected one of: {", ".join(EMPTY_NOTE_MESSAGES)}'
        ) from None


def is_blank(note: str) -> bool:
    """True for an empty note or one made only of whitespace."""
    return BLANK_NOTE_PATTERN.fullmatch(note) is not None


def has_invalid_characters(note: str) -> bool:
    """Check the raw, untrimmed note against the allowed character set."""
    return ALLOWED_NOTE_PATTERN.fullmatch(note) is None


def check_fields(fields: SectionFields, selection_noun: str,
                 empty_note_message: str = TEXT_REQUIRED_MESSAGE,
                 section: str = '') -> ValidationResult:
    """
    Run every rule against a snapshot of section fields.

    Args:
        fields: Current field values
        selection_noun: Noun used in the missing-selection message
        empty_note_message: Message for an empty or whitespace-only note
        section: Section id recorded on each error

    Returns:
        ValidationResult with errors in the documented order
    """
    result = ValidationResult()

    if fields.selection is None:
        result.add_error('selection', missing_selection_message(selection_noun), 'required', section)

    if is_blank(fields.note):
        result.add_error('note', empty_note_message, 'required', section)
    elif has_invalid_characters(fields.note):
        result.add_error('note', INVALID_CHARACTERS_MESSAGE, 'invalid_chars', section)

    if not fields.acknowledged:
        result.add_error('acknowledged', NOT_ACKNOWLEDGED_MESSAGE, 'not_acknowledged', section)

    return result


def evaluate(fields: SectionFields, selection_noun: str,
             empty_note_message: str = TEXT_REQUIRED_MESSAGE) -> List[str]:
    """
    Return the ordered list of problems for ``fields``; empty means valid.
    """
    return check_fields(fields, selection_noun, empty_note_message).messages()


def validate_section_fields(fields: SectionFields, config: SectionConfig) -> ValidationResult:
    """Validate fields using a section's configured noun and wording."""
    return check_fields(
        fields,
        config.selection_noun,
        config.empty_note_message,
        section=config.section_id
    )
