"""
API route tests using the Flask test client.
"""

from unittest import mock

from sqlalchemy.exc import OperationalError

from job_application.audit_logger import (
    AuditAction, get_audit_trail_for_application, verify_audit_integrity
)
from job_application.models import Application, AuditLog
from job_application.routes import store


class TestHealth:
    def test_health(self, client):
        response = client.get('/health')
        assert response.status_code == 200
        assert response.get_json() == {'ok': True}

    def test_security_headers(self, client):
        response = client.get('/health')
        assert response.headers['X-Content-Type-Options'] == 'nosniff'
        assert response.headers['X-Frame-Options'] == 'DENY'


class TestAppConfig:
    def test_no_signing_key(self, app):
        assert app.config['SECRET_KEY'] is None


class TestValidateEndpoint:
    def test_valid_payload(self, client, valid_payload):
        response = client.post('/api/applications/validate', json=valid_payload)
        assert response.status_code == 200
        assert response.get_json() == {'valid': True, 'errors': {}}

    def test_invalid_payload_is_still_200(self, client, valid_payload):
        valid_payload['workEligibility'] = {'workAuth': 'no'}
        response = client.post('/api/applications/validate', json=valid_payload)
        assert response.status_code == 200
        body = response.get_json()
        assert body['valid'] is False
        assert set(body['errors']) == {
            'workEligibility.sponsorshipNeeded',
            'workEligibility.explanation'
        }

    def test_partial_payload(self, client):
        response = client.post('/api/applications/validate', json={'personalInfo': {'firstName': 'Jo'}})
        assert response.status_code == 200
        errors = response.get_json()['errors']
        assert 'personalInfo.firstName' not in errors
        assert 'personalInfo.lastName' in errors
        assert 'experience.yearsExperience' in errors

    def test_non_json_body(self, client):
        response = client.post('/api/applications/validate', data='not json')
        assert response.status_code == 200
        assert response.get_json()['valid'] is False

    def test_nothing_is_stored(self, app, client, valid_payload):
        client.post('/api/applications/validate', json=valid_payload)
        with app.app_context():
            assert Application.query.count() == 0


class TestSubmitEndpoint:
    def test_submit_and_fetch(self, client, valid_payload):
        response = client.post('/api/applications', json=valid_payload)
        assert response.status_code == 201
        application_id = response.get_json()['id']
        assert application_id

        fetched = client.get(f'/api/applications/{application_id}')
        assert fetched.status_code == 200
        body = fetched.get_json()
        assert body['id'] == application_id
        assert body['submittedAt'].endswith('Z')
        assert body['personalInfo'] == valid_payload['personalInfo']
        assert body['workEligibility'] == valid_payload['workEligibility']
        assert body['experience'] == valid_payload['experience']

    def test_each_submission_gets_its_own_id(self, app, client, valid_payload):
        first = client.post('/api/applications', json=valid_payload).get_json()['id']
        valid_payload['personalInfo']['firstName'] = 'Jane'
        second = client.post('/api/applications', json=valid_payload).get_json()['id']

        assert first != second
        assert client.get(f'/api/applications/{first}').get_json()['personalInfo']['firstName'] == 'John'
        assert client.get(f'/api/applications/{second}').get_json()['personalInfo']['firstName'] == 'Jane'
        with app.app_context():
            assert Application.query.count() == 2

    def test_invalid_submission_is_not_stored(self, app, client, valid_payload):
        valid_payload['experience']['yearsExperience'] = -1

        with mock.patch.object(store, 'save') as save:
            response = client.post('/api/applications', json=valid_payload)

        assert response.status_code == 400
        assert response.get_json() == {
            'error': 'Validation failed',
            'errors': {
                'experience.yearsExperience': 'Years of experience must be a non-negative integer'
            }
        }
        save.assert_not_called()
        with app.app_context():
            assert Application.query.count() == 0

    def test_unknown_keys_are_dropped(self, client, valid_payload):
        valid_payload['personalInfo']['isAdmin'] = True
        valid_payload['extra'] = 'x'

        application_id = client.post('/api/applications', json=valid_payload).get_json()['id']
        body = client.get(f'/api/applications/{application_id}').get_json()

        assert 'isAdmin' not in body['personalInfo']
        assert 'extra' not in body

    def test_inapplicable_conditional_values_are_not_stored(self, client, valid_payload):
        valid_payload['workEligibility'] = {
            'workAuth': 'yes',
            'sponsorshipNeeded': 'yes',
            'explanation': 'stale text nobody should see'
        }

        application_id = client.post('/api/applications', json=valid_payload).get_json()['id']
        body = client.get(f'/api/applications/{application_id}').get_json()

        assert body['workEligibility'] == {'workAuth': 'yes'}

    def test_storage_error(self, client, valid_payload):
        error = OperationalError('INSERT', {}, Exception('disk full'))
        with mock.patch.object(store, 'save', side_effect=error):
            response = client.post('/api/applications', json=valid_payload)

        assert response.status_code == 500
        assert response.get_json() == {'error': 'Failed to store application'}


class TestGetEndpoint:
    def test_unknown_id(self, client):
        response = client.get('/api/applications/does-not-exist')
        assert response.status_code == 404
        assert response.get_json() == {'error': 'Application not found'}

    def test_unknown_route(self, client):
        response = client.get('/api/nothing-here')
        assert response.status_code == 404
        assert response.get_json() == {'error': 'Not found'}


class TestAuditTrail:
    def test_creation_and_view_are_audited(self, app, client, valid_payload):
        application_id = client.post('/api/applications', json=valid_payload).get_json()['id']
        client.get(f'/api/applications/{application_id}')

        with app.app_context():
            trail = get_audit_trail_for_application(application_id)
            assert [entry['action'] for entry in trail] == [
                AuditAction.APPLICATION_CREATED,
                AuditAction.APPLICATION_VIEWED
            ]
            valid_count, invalid_count, _ = verify_audit_integrity()
            assert valid_count == 2
            assert invalid_count == 0

    def test_validation_failure_is_audited_without_values(self, app, client, valid_payload):
        valid_payload['personalInfo']['email'] = 'leaked-secret'
        client.post('/api/applications', json=valid_payload)

        with app.app_context():
            log = AuditLog.query.filter_by(action=AuditAction.VALIDATION_FAILED).one()
            assert log.success is False
            assert log.to_dict()['details'] == {
                'error_count': 1,
                'fields': ['personalInfo.email']
            }
            assert 'leaked-secret' not in log.details_json

    def test_audit_can_be_disabled(self, app, client, valid_payload):
        app.config['AUDIT_LOG_ENABLED'] = False
        client.post('/api/applications', json=valid_payload)

        with app.app_context():
            assert AuditLog.query.count() == 0
