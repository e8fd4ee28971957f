"""
Two-Section Validation Demo

Two independent form sections, each with a catalog selection, a free-text
note and an acknowledgment checkbox, validated on demand.

Enhanced with:
- CSRF protection
- Rate limiting
- Security headers
- Audit logging
"""

import os
from datetime import datetime, timedelta
from flask import Flask, request, g, jsonify


def create_app(test_config=None):
    """Application factory pattern."""
    app = Flask(__name__, instance_relative_config=True)

    # Default configuration
    app.config.from_mapping(
        SECRET_KEY=os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production'),
        SESSION_COOKIE_SECURE=os.environ.get('SESSION_COOKIE_SECURE', 'false').lower() == 'true',
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE='Lax',
        SESSION_COOKIE_MAX_SIZE=4000,  # bytes of name=value
        PERMANENT_SESSION_LIFETIME=timedelta(hours=1),

        # Section settings
        EMPTY_NOTE_WORDING=os.environ.get('EMPTY_NOTE_WORDING', 'text'),
        SECTION_CATALOGS={'s1': 'films', 's2': 'seasons'},
        SECTION_NOUNS={'s1': 'film', 's2': 'Season'},

        # CSRF settings
        WTF_CSRF_ENABLED=True,
        WTF_CSRF_TIME_LIMIT=3600,  # 1 hour
        WTF_CSRF_SSL_STRICT=False,  # Disabled for development

        # Rate limiting settings
        RATELIMIT_STORAGE_URI=os.environ.get('REDIS_URL', 'memory://'),
        RATELIMIT_STRATEGY='fixed-window',
        RATELIMIT_DEFAULT='100 per minute',
        RATELIMIT_HEADERS_ENABLED=True,
    )

    if test_config is None:
        # Load instance config if it exists
        app.config.from_pyfile('config.py', silent=True)
    else:
        # Load test config
        app.config.from_mapping(test_config)

    # Section configuration is immutable and shared by all requests
    from section_forms.sections import build_section_configs
    app.extensions['section_configs'] = tuple(build_section_configs(app.config))

    from section_forms.security import add_security_headers, init_security
    init_security(app)

    # Register blueprints
    from section_forms.routes import main_bp, api_bp
    app.register_blueprint(main_bp)
    app.register_blueprint(api_bp)

    # Add security headers to all responses
    @app.after_request
    def after_request(response):
        """Add security headers to all responses."""
        return add_security_headers(response)

    # Request logging
    @app.before_request
    def before_request():
        """Log request start."""
        g.request_start_time = datetime.utcnow()

    @app.after_request
    def log_request(response):
        """Log request completion."""
        if hasattr(g, 'request_start_time'):
            duration = (datetime.utcnow() - g.request_start_time).total_seconds()
            app.logger.info(
                f'{request.method} {request.path} - {response.status_code} - {duration:.3f}s'
            )
        return response

    # Template globals
    @app.context_processor
    def inject_globals():
        return {
            'current_year': datetime.utcnow().year,
            'app_name': 'Validation Demo'
        }

    # Error handlers
    @app.errorhandler(500)
    def internal_error(error):
        """Handle internal errors."""
        app.logger.error(f'Internal error: {str(error)}')
        return jsonify({'ok': False, 'error': 'Internal server error'}), 500

    return app
