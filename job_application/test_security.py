"""
Security Tests

Tests for security features:
- Security headers
- Client address resolution
- Rate limiting
"""

import unittest

from flask import Flask

from job_application import create_app, db
from job_application.security import add_security_headers, get_client_ip


class TestSecurityHeaders(unittest.TestCase):
    """Test response hardening."""

    def test_headers_added(self):
        app = Flask(__name__)
        response = add_security_headers(app.response_class('{}'))
        self.assertEqual(response.headers['X-Content-Type-Options'], 'nosniff')
        self.assertEqual(response.headers['X-Frame-Options'], 'DENY')
        self.assertIn("default-src 'none'", response.headers['Content-Security-Policy'])


class TestClientIp(unittest.TestCase):
    """Test client address resolution behind proxies."""

    def setUp(self):
        self.app = Flask(__name__)

    def test_forwarded_for_first_hop(self):
        with self.app.test_request_context(headers={'X-Forwarded-For': '10.0.0.1, 10.0.0.2'}):
            self.assertEqual(get_client_ip(), '10.0.0.1')

    def test_real_ip(self):
        with self.app.test_request_context(headers={'X-Real-Ip': '10.0.0.9'}):
            self.assertEqual(get_client_ip(), '10.0.0.9')

    def test_remote_addr(self):
        with self.app.test_request_context(environ_base={'REMOTE_ADDR': '127.0.0.5'}):
            self.assertEqual(get_client_ip(), '127.0.0.5')


class TestRateLimiting(unittest.TestCase):
    """Test that submission is rate limited when enabled."""

    def setUp(self):
        self.app = create_app({
            'TESTING': True,
            'SQLALCHEMY_DATABASE_URI': 'sqlite://',
            'RATELIMIT_ENABLED': True,
            'RATELIMIT_STORAGE_URI': 'memory://',
        })
        self.client = self.app.test_client()

    def tearDown(self):
        with self.app.app_context():
            db.session.remove()
            db.drop_all()

    def test_submit_limit(self):
        statuses = [self.client.post('/api/applications', json={}).status_code for _ in range(11)]
        self.assertEqual(statuses[:10], [400] * 10)
        self.assertEqual(statuses[10], 429)
        self.assertEqual(
            self.client.post('/api/applications', json={}).get_json(),
            {'error': 'Rate limit exceeded. Please try again later.'}
        )

    def test_health_is_exempt(self):
        for _ in range(60):
            self.assertEqual(self.client.get('/health').status_code, 200)
