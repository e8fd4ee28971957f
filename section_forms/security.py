"""
Security hardening module.

Provides CSRF protection, rate limiting and security headers for the
section forms and the JSON API.
"""

from flask import request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_wtf.csrf import CSRFProtect, generate_csrf


# Initialize extensions at module level
csrf = CSRFProtect()
limiter = Limiter(key_func=get_remote_address)


# Rate limit configurations
RATE_LIMITS = {
    'validate': "60 per minute",
    'update': "300 per minute",
    'reset': "60 per minute",
}


def add_security_headers(response):
    """
    Add security headers to response.
    This is a standalone function that can be used as an after_request handler.
    """
    # Content Security Policy
    response.headers['Content-Security-Policy'] = (
        "default-src 'self'; "
        "script-src 'self'; "
        "style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data:; "
        "connect-src 'self';"
    )

    # Prevent MIME type sniffing
    response.headers['X-Content-Type-Options'] = 'nosniff'

    # Prevent clickjacking
    response.headers['X-Frame-Options'] = 'DENY'

    # Referrer policy
    response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

    return response


def init_security(app):
    """Initialize security extensions with the app."""
    # Initialize CSRF protection
    csrf.init_app(app)

    # Initialize rate limiter
    limiter.init_app(app)


def rate_limit(action: str):
    """Decorator applying the configured limit for a section action."""
    return limiter.limit(RATE_LIMITS[action])


def issue_csrf_token() -> str:
    """Return the CSRF token bound to the current session."""
    return generate_csrf()


def get_client_ip() -> str:
    """Get the client IP address, handling proxies."""
    # Check for forwarded header (if behind proxy)
    forwarded_for = request.headers.get('X-Forwarded-For')
    if forwarded_for:
        # Get first IP in chain
        return forwarded_for.split(',')[0].strip()

    # Check for real IP header
    real_ip = request.headers.get('X-Real-Ip')
    if real_ip:
        return real_ip

    # Fall back to remote address
    return request.remote_addr or 'unknown'
