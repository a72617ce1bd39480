"""
Security hardening module.

Provides rate limiting, response security headers and client address
resolution for the API.
"""

from flask import request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address


# Initialize extensions at module level
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"]
)


# Rate limit configurations
RATE_LIMITS = {
    'validate': "60 per minute",
    'submit': "10 per minute",
    'read': "60 per minute",
}


def add_security_headers(response):
    """
    Add security headers to response.
    This is a standalone function that can be used as an after_request handler.
    """
    # JSON only, nothing to load or frame
    response.headers['Content-Security-Policy'] = "default-src 'none'; frame-ancestors 'none'"

    # Prevent MIME type sniffing
    response.headers['X-Content-Type-Options'] = 'nosniff'

    # Prevent clickjacking
    response.headers['X-Frame-Options'] = 'DENY'

    # Referrer policy
    response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

    return response


def init_security(app):
    """Initialize security extensions with the app."""
    limiter.init_app(app)


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
