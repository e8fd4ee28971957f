"""
Keeps each browser's section state in the signed Flask session.

Nothing is written anywhere else; state ends with the browser session.
"""

from typing import Any, Dict

from flask import current_app, session

from section_forms.controller import SectionRegistry
from section_forms.models import Section, SectionFields, Verdict


SESSION_KEY = 'sections'

# Browsers drop cookies over roughly 4 KB
MAX_SESSION_COOKIE_SIZE = 4000


class SessionTooLargeError(ValueError):
    """The section state does not fit in the session cookie."""

    def __init__(self, size: int, limit: int):
        super().__init__(f'Session state of {size} bytes exceeds the {limit} byte cookie limit')
        self.size = size
        self.limit = limit


def dump_section(section: Section) -> Dict[str, Any]:
    """Serialise one section for the session cookie."""
    selection = section.fields.selection
    return {
        'selection': selection.title if selection else None,
        'note': section.fields.note,
        'acknowledged': section.fields.acknowledged,
        'verdict': {
            'status': section.verdict.status.value,
            'problems': list(section.verdict.problems),
        },
    }


def restore_section(section: Section, data: Dict[str, Any]):
    """
    Load stored values onto a freshly built section.

    A stored title missing from the current catalog falls back to no selection.
    """
    selection = None
    title = data.get('selection')
    if title:
        selection = section.config.catalog.find(title)
        if selection is None:
            current_app.logger.warning(
                f'Dropping stale selection {title!r} for section {section.section_id}'
            )

    section.fields = SectionFields(
        selection=selection,
        note=data.get('note', ''),
        acknowledged=bool(data.get('acknowledged', False)),
    )
    section.verdict = Verdict.from_dict(data.get('verdict') or {'status': 'unevaluated'})


def load_registry() -> SectionRegistry:
    """Build a registry from the app's section configs and this session's state."""
    registry = SectionRegistry(current_app.extensions['section_configs'])
    stored = session.get(SESSION_KEY) or {}

    for section in registry:
        data = stored.get(section.section_id)
        if data:
            restore_section(section, data)
    return registry


def session_cookie_size(data: Dict[str, Any]) -> int:
    """Length of the name=value pair the session cookie would carry for ``data``."""
    serializer = current_app.session_interface.get_signing_serializer(current_app)
    return len(current_app.config['SESSION_COOKIE_NAME']) + 1 + len(serializer.dumps(data))


def save_registry(registry: SectionRegistry):
    """
    Store the registry in the session.

    Raises:
        SessionTooLargeError: if the resulting cookie would exceed
            ``SESSION_COOKIE_MAX_SIZE``; the session is left unchanged
    """
    state = {section.section_id: dump_section(section) for section in registry}

    candidate = dict(session)
    candidate[SESSION_KEY] = state
    size = session_cookie_size(candidate)
    limit = current_app.config.get('SESSION_COOKIE_MAX_SIZE', MAX_SESSION_COOKIE_SIZE)
    if size > limit:
        current_app.logger.warning(f'Refusing to store {size} byte session cookie (limit {limit})')
        raise SessionTooLargeError(size, limit)

    session[SESSION_KEY] = state
