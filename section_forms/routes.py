"""
Flask routes for the section forms.

The HTML blueprint renders both sections in one form and handles its posts.
The API blueprint exposes the same operations as JSON.
"""

from typing import Any, Dict, List, Optional

from flask import (
    Blueprint, render_template, request, jsonify,
    redirect, url_for, flash, abort, current_app
)

from section_forms import utils
from section_forms.audit_logger import (
    log_validation_result, log_section_reset, log_fields_updated
)
from section_forms.controller import SectionRegistry
from section_forms.models import Section, UnknownSectionError
from section_forms.security import rate_limit, issue_csrf_token, get_client_ip
from section_forms.store import SessionTooLargeError, load_registry, save_registry
from section_forms.validation import MAX_NOTE_LENGTH, coerce_to_bool, validate_section_fields


# Create blueprints
main_bp = Blueprint('main', __name__)
api_bp = Blueprint('api', __name__, url_prefix='/api')

FIELD_NAMES = ('selection', 'note', 'acknowledged')
FORM_ACTIONS = ('validate', 'reset', 'update')

TOO_LARGE_MESSAGE = 'Your entries are too long to keep. Please shorten the text.'


class FieldUpdateError(Exception):
    """A submitted field value could not be applied to a section."""

    def __init__(self, field: str, message: str, code: str):
        super().__init__(message)
        self.field = field
        self.message = message
        self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {'field': self.field, 'message': self.message, 'code': self.code}


def too_large_response():
    return jsonify({
        'ok': False,
        'errors': [{'field': '', 'message': TOO_LARGE_MESSAGE, 'code': 'too_large'}]
    }), 400


def apply_field_updates(section: Section, data: Dict[str, Any]) -> List[str]:
    """
    Apply any of selection/note/acknowledged present in ``data``.

    The verdict is left as it was.

    Returns:
        Names of the fields that were applied

    Raises:
        FieldUpdateError: on the first value that cannot be applied
    """
    applied = []
    for name in FIELD_NAMES:
        if name not in data:
            continue
        value = data[name]
        try:
            if name == 'selection':
                section.select(value)
            elif name == 'note':
                if isinstance(value, str) and len(value) > MAX_NOTE_LENGTH:
                    raise FieldUpdateError(
                        name, f'Maximum {MAX_NOTE_LENGTH} characters allowed', 'max_length'
                    )
                section.set_note(value)
            else:
                acknowledged = coerce_to_bool(value)
                if acknowledged is None:
                    raise TypeError('acknowledged must be true or false')
                section.set_acknowledged(acknowledged)
        except TypeError as e:
            raise FieldUpdateError(name, str(e), 'type') from e
        except ValueError as e:
            raise FieldUpdateError(name, str(e), 'invalid_selection') from e
        applied.append(name)
    return applied


def get_section(registry: SectionRegistry, section_id: str) -> Section:
    try:
        return registry.get(section_id)
    except UnknownSectionError:
        abort(404)


def form_field_values(section_id: str) -> Optional[Dict[str, Any]]:
    """
    Read one section's fields from the page form.

    Fields are prefixed with the section id. Returns None when the post does
    not carry that section. An unticked checkbox is simply absent.
    """
    prefix = f'{section_id}-'
    if f'{prefix}note' not in request.form:
        return None
    return {
        'selection': request.form.get(f'{prefix}selection', ''),
        'note': request.form.get(f'{prefix}note', ''),
        'acknowledged': f'{prefix}acknowledged' in request.form,
    }


@main_bp.app_context_processor
def inject_display_helpers():
    return {
        'current_values_line': utils.current_values_line,
        'success_message': utils.success_message,
        'checkbox_label': utils.checkbox_label,
        'note_label': utils.note_label,
        'selection_label': utils.selection_label,
        'max_note_length': MAX_NOTE_LENGTH,
    }


# Main routes
@main_bp.route('/')
def index():
    """Render both sections."""
    registry = load_registry()
    return render_template('index.html', sections=list(registry))


@main_bp.route('/sections/<section_id>', methods=['POST'])
@rate_limit('validate')
def submit_section(section_id):
    """
    Handle the Validate, Reset and plain update buttons of one section.

    The page posts every section's fields, so values typed into the other
    section are kept too.
    """
    registry = load_registry()
    get_section(registry, section_id)
    action = request.form.get('action', 'validate')
    actor_id = get_client_ip()

    if action not in FORM_ACTIONS:
        flash(f'Unknown action: {action}', 'error')
        return redirect(url_for('main.index'))

    updates = []
    for section in registry:
        if action == 'reset' and section.section_id == section_id:
            continue
        values = form_field_values(section.section_id)
        if values is None:
            continue
        try:
            applied = apply_field_updates(section, values)
        except FieldUpdateError as e:
            flash(f'{section.config.title}: {e.message}', 'error')
            return redirect(url_for('main.index', _anchor=section.section_id))
        updates.append((section.section_id, applied))

    verdict = None
    if action == 'reset':
        registry.reset(section_id)
    elif action == 'validate':
        verdict = registry.validate(section_id)

    try:
        save_registry(registry)
    except SessionTooLargeError:
        flash(TOO_LARGE_MESSAGE, 'error')
        return redirect(url_for('main.index', _anchor=section_id))

    for updated_id, applied in updates:
        log_fields_updated(updated_id, applied, actor_id=actor_id)
    if action == 'reset':
        log_section_reset(section_id, actor_id=actor_id)
    elif verdict is not None:
        log_validation_result(section_id, verdict, actor_id=actor_id)

    return redirect(url_for('main.index', _anchor=section_id))


# API Routes
@api_bp.route('/csrf-token', methods=['GET'])
def api_csrf_token():
    """Issue a CSRF token for API clients."""
    return jsonify({'ok': True, 'csrf_token': issue_csrf_token()}), 200


@api_bp.route('/sections', methods=['GET'])
def api_list_sections():
    registry = load_registry()
    return jsonify({'ok': True, 'sections': [section.to_dict() for section in registry]}), 200


@api_bp.route('/sections/<section_id>', methods=['GET'])
def api_get_section(section_id):
    registry = load_registry()
    section = get_section(registry, section_id)
    return jsonify({'ok': True, 'section': section.to_dict()}), 200


@api_bp.route('/sections/<section_id>/catalog', methods=['GET'])
def api_get_catalog(section_id):
    registry = load_registry()
    section = get_section(registry, section_id)
    return jsonify({
        'ok': True,
        'selection_noun': section.config.selection_noun,
        'items': section.config.catalog.to_list()
    }), 200


@api_bp.route('/sections/<section_id>', methods=['PATCH'])
@rate_limit('update')
def api_update_section(section_id):
    """
    Update some or all fields of a section.

    The previous verdict is kept until the next validate.
    """
    registry = load_registry()
    section = get_section(registry, section_id)

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict) or not payload:
        return jsonify({
            'ok': False,
            'errors': [{'field': '', 'message': 'No JSON payload provided', 'code': 'missing_payload'}]
        }), 400

    try:
        applied = apply_field_updates(section, payload)
    except FieldUpdateError as e:
        return jsonify({'ok': False, 'errors': [e.to_dict()]}), 400

    try:
        save_registry(registry)
    except SessionTooLargeError:
        return too_large_response()

    log_fields_updated(section_id, applied, actor_id=get_client_ip())
    return jsonify({'ok': True, 'section': section.to_dict()}), 200


@api_bp.route('/sections/<section_id>/validate', methods=['POST'])
@rate_limit('validate')
def api_validate_section(section_id):
    """
    Validate a section, optionally applying field values from the body first.

    Returns:
        200 with the section when valid, 422 with the joined message and
        per-field errors when invalid
    """
    registry = load_registry()
    section = get_section(registry, section_id)
    actor_id = get_client_ip()

    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return jsonify({
            'ok': False,
            'errors': [{'field': '', 'message': 'Payload must be a JSON object', 'code': 'type'}]
        }), 400

    try:
        applied = apply_field_updates(section, payload)
    except FieldUpdateError as e:
        return jsonify({'ok': False, 'errors': [e.to_dict()]}), 400
    try:
        result = validate_section_fields(section.fields, section.config)
        verdict = registry.validate(section_id)
    except Exception as e:
        current_app.logger.error(f'Validation error: {str(e)}')
        return jsonify({
            'ok': False,
            'errors': [{'field': '', 'message': 'Internal validation error', 'code': 'internal_error'}]
        }), 500

    try:
        save_registry(registry)
    except SessionTooLargeError:
        return too_large_response()

    if applied:
        log_fields_updated(section_id, applied, actor_id=actor_id)
    log_validation_result(section_id, verdict, actor_id=actor_id)

    if verdict.is_valid:
        return jsonify({'ok': True, 'errors': [], 'section': section.to_dict()}), 200

    response = result.to_dict()
    response['section'] = section.to_dict()
    return jsonify(response), 422


@api_bp.route('/sections/<section_id>/reset', methods=['POST'])
@rate_limit('reset')
def api_reset_section(section_id):
    registry = load_registry()
    get_section(registry, section_id)

    registry.reset(section_id)
    try:
        save_registry(registry)
    except SessionTooLargeError:
        return too_large_response()

    log_section_reset(section_id, actor_id=get_client_ip())
    return jsonify({'ok': True, 'section': registry.get(section_id).to_dict()}), 200


# Error handlers
@main_bp.errorhandler(404)
@api_bp.errorhandler(404)
def not_found(error):
    """Handle 404 errors."""
    if request.is_json or request.path.startswith('/api/'):
        return jsonify({'ok': False, 'error': 'Not found'}), 404
    return render_template('base.html', error='Page not found'), 404


@main_bp.errorhandler(429)
@api_bp.errorhandler(429)
def rate_limit_handler(error):
    """Handle rate limit errors."""
    if request.is_json or request.path.startswith('/api/'):
        return jsonify({
            'ok': False,
            'error': 'Rate limit exceeded. Please try again later.'
        }), 429
    return render_template('base.html', error='Too many requests. Please try again later.'), 429
