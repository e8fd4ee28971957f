"""
Section actions: validate and reset.

The controller is the only writer of a section's verdict.
"""

from typing import Dict, Iterable, Iterator, List, Optional

from section_forms.models import (
    Section, SectionConfig, SectionFields, UnknownSectionError, Verdict
)
from section_forms.validation import evaluate


class SectionController:
    """Bridges user actions to the validator and the section verdict."""

    def validate(self, section: Section, selection_noun: Optional[str] = None) -> Verdict:
        """
        Validate the section's current fields and store the verdict.

        Args:
            section: Section to validate
            selection_noun: Overrides the configured noun for the missing-selection message

        Returns:
            The stored verdict
        """
        noun = selection_noun or section.config.selection_noun
        problems = evaluate(section.fields, noun, section.config.empty_note_message)

        if problems:
            section.verdict = Verdict.invalid(problems)
        else:
            section.verdict = Verdict.valid()
        return section.verdict

    def reset(self, section: Section):
        """Restore default fields and clear the verdict."""
        section.fields = SectionFields()
        section.verdict = Verdict.unevaluated()


class SectionRegistry:
    """
    The sections shown side by side, keyed by section id.

    Iteration follows configuration order.
    """

    def __init__(self, configs: Iterable[SectionConfig], controller: SectionController = None):
        self.controller = controller or SectionController()
        self._sections: Dict[str, Section] = {}
        for config in configs:
            if config.section_id in self._sections:
                raise ValueError(f'Duplicate section id: {config.section_id}')
            self._sections[config.section_id] = Section(config)

    def get(self, section_id: str) -> Section:
        try:
            return self._sections[section_id]
        except KeyError:
            raise UnknownSectionError(section_id) from None

    def ids(self) -> List[str]:
        return list(self._sections)

    def validate(self, section_id: str) -> Verdict:
        return self.controller.validate(self.get(section_id))

    def reset(self, section_id: str):
        self.controller.reset(self.get(section_id))

    def __iter__(self) -> Iterator[Section]:
        return iter(self._sections.values())

    def __len__(self) -> int:
        return len(self._sections)

    def __contains__(self, section_id) -> bool:
        return section_id in self._sections
