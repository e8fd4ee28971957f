"""
Audit logging for section actions.

Every validate, reset and field update is written as one structured JSON
line on the application logger. Nothing is stored.
"""

import json
import logging
from datetime import datetime
from typing import Dict, Any, Optional
from flask import request, current_app, has_app_context

from section_forms.models import Verdict


module_logger = logging.getLogger(__name__)


class AuditAction:
    """Constants for audit actions."""
    VALIDATION_PASSED = 'section_validated_passed'
    VALIDATION_FAILED = 'section_validated_failed'
    SECTION_RESET = 'section_reset'
    FIELDS_UPDATED = 'section_fields_updated'


class AuditCategory:
    """Constants for audit action categories."""
    UPDATE = 'update'
    VALIDATE = 'validate'
    RESET = 'reset'


def _logger():
    if has_app_context():
        return current_app.logger
    return module_logger


def build_record(
    action: str,
    action_category: str,
    resource_type: str,
    resource_id: Optional[str] = None,
    actor_type: str = 'user',
    actor_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    success: bool = True
) -> Dict[str, Any]:
    """
    Assemble an audit record, filling request context when available.

    Args:
        action: The action performed (use AuditAction constants)
        action_category: Category of action (use AuditCategory constants)
        resource_type: Type of resource affected
        resource_id: Identifier of the resource
        actor_type: Type of actor ('user', 'system')
        actor_id: Identifier of the actor (defaults to the client IP)
        details: Additional structured details
        success: Whether the action succeeded

    Returns:
        The record as a dictionary
    """
    ip_address = None
    user_agent = None

    try:
        if request:
            ip_address = request.remote_addr
            user_agent = request.headers.get('User-Agent')

            if actor_type == 'user' and not actor_id:
                actor_id = ip_address
    except RuntimeError:
        # Outside request context
        pass

    return {
        'timestamp': datetime.utcnow().isoformat(),
        'action': action,
        'action_category': action_category,
        'resource_type': resource_type,
        'resource_id': str(resource_id) if resource_id else None,
        'actor_type': actor_type,
        'actor_id': actor_id,
        'details': details,
        'success': success,
        'ip_address': ip_address,
        'user_agent': user_agent,
    }


def log_action(action: str, action_category: str, resource_type: str, **kwargs) -> Optional[Dict[str, Any]]:
    """
    Write an audit line. Returns the record, or None if logging failed.

    Audit failures are reported on the logger and never raised.
    """
    try:
        record = build_record(action, action_category, resource_type, **kwargs)
        _logger().info(f'audit {json.dumps(record, sort_keys=True)}')
        return record
    except Exception as e:
        _logger().error(f'Failed to write audit log: {str(e)}')
        return None


def log_validation_result(section_id: str, verdict: Verdict, actor_id: str = None) -> Optional[Dict[str, Any]]:
    """Log the outcome of a validate action."""
    passed = verdict.is_valid
    return log_action(
        action=AuditAction.VALIDATION_PASSED if passed else AuditAction.VALIDATION_FAILED,
        action_category=AuditCategory.VALIDATE,
        resource_type='section',
        resource_id=section_id,
        actor_id=actor_id,
        details={'problem_count': len(verdict.problems), 'problems': list(verdict.problems)} if not passed else None,
        success=passed
    )


def log_section_reset(section_id: str, actor_id: str = None) -> Optional[Dict[str, Any]]:
    """Log a reset action."""
    return log_action(
        action=AuditAction.SECTION_RESET,
        action_category=AuditCategory.RESET,
        resource_type='section',
        resource_id=section_id,
        actor_id=actor_id
    )


def log_fields_updated(section_id: str, changed: list, actor_id: str = None) -> Optional[Dict[str, Any]]:
    """Log which fields changed. Values are not recorded."""
    return log_action(
        action=AuditAction.FIELDS_UPDATED,
        action_category=AuditCategory.UPDATE,
        resource_type='section',
        resource_id=section_id,
        actor_id=actor_id,
        details={'fields': sorted(changed)}
    )
