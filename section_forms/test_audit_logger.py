"""
Unit tests for audit logging.
"""

import json
import logging

from section_forms.audit_logger import (
    AuditAction, log_action, log_validation_result, log_section_reset, log_fields_updated
)
from section_forms.models import Verdict


class TestAuditLogger:
    def test_outside_app_context_uses_module_logger(self, caplog):
        with caplog.at_level(logging.INFO, logger='section_forms.audit_logger'):
            record = log_section_reset('s1', actor_id='tester')
        assert record['action'] == AuditAction.SECTION_RESET
        assert record['actor_id'] == 'tester'
        assert record['ip_address'] is None
        assert 'section_reset' in caplog.text

    def test_failed_validation_records_problems(self):
        record = log_validation_result('s2', Verdict.invalid(['Please choose a Season']))
        assert record['action'] == AuditAction.VALIDATION_FAILED
        assert record['success'] is False
        assert record['details'] == {'problem_count': 1, 'problems': ['Please choose a Season']}

    def test_passed_validation_has_no_details(self):
        record = log_validation_result('s1', Verdict.valid())
        assert record['action'] == AuditAction.VALIDATION_PASSED
        assert record['details'] is None

    def test_field_update_records_names_only(self):
        record = log_fields_updated('s1', ['note', 'acknowledged'])
        assert record['details'] == {'fields': ['acknowledged', 'note']}

    def test_logged_line_is_json(self, caplog):
        with caplog.at_level(logging.INFO, logger='section_forms.audit_logger'):
            log_action('custom', 'update', 'section', resource_id='s1')
        line = caplog.records[-1].getMessage()
        assert line.startswith('audit ')
        assert json.loads(line[len('audit '):])['resource_id'] == 's1'

    def test_unserialisable_details_do_not_raise(self, caplog):
        with caplog.at_level(logging.ERROR, logger='section_forms.audit_logger'):
            assert log_action('custom', 'update', 'section', details={'bad': object()}) is None
        assert 'Failed to write audit log' in caplog.text
