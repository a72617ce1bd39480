"""
Flask routes for the job application service.

- POST /api/applications/validate  report validity without storing
- POST /api/applications           validate and store
- GET  /api/applications/<id>      fetch a stored application
- GET  /health                     liveness probe
"""

from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError

from job_application import db
from job_application.audit_logger import (
    log_application_created, log_application_viewed, log_validation_failed
)
from job_application.record import ApplicationRecord
from job_application.security import limiter, get_client_ip, RATE_LIMITS
from job_application.store import ApplicationStore
from job_application.validation import validate_application


# Create blueprints
main_bp = Blueprint('main', __name__)
api_bp = Blueprint('api', __name__, url_prefix='/api')

store = ApplicationStore()


def _record_from_request() -> ApplicationRecord:
    """Read the request body as an application; anything else is an empty one."""
    return ApplicationRecord.from_dict(request.get_json(silent=True))


@main_bp.route('/health')
@limiter.exempt
def health():
    """Liveness probe."""
    return jsonify({'ok': True}), 200


@api_bp.route('/applications/validate', methods=['POST'])
@limiter.limit(RATE_LIMITS['validate'])
def api_validate_application():
    """
    Validate an application without storing it.

    Invalid input is the expected answer here, so this always returns 200.

    Returns:
        JSON {valid, errors}
    """
    record = _record_from_request()
    result = validate_application(record.to_dict())
    return jsonify(result.to_dict()), 200


@api_bp.route('/applications', methods=['POST'])
@limiter.limit(RATE_LIMITS['submit'])
def api_submit_application():
    """
    Validate and store an application.

    Returns:
        201 {id} on success, 400 with the field errors otherwise
    """
    record = _record_from_request()
    result = validate_application(record.to_dict())

    if not result.valid:
        log_validation_failed(result.errors, actor_id=get_client_ip())
        return jsonify({'error': 'Validation failed', 'errors': result.errors}), 400

    try:
        stored = store.save(record)
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to store application: {str(e)}')
        return jsonify({'error': 'Failed to store application'}), 500

    current_app.logger.info(f'Application {stored.id} submitted')
    log_application_created(stored.id, actor_id=get_client_ip())

    return jsonify({'id': stored.id}), 201


@api_bp.route('/applications/<application_id>', methods=['GET'])
@limiter.limit(RATE_LIMITS['read'])
def api_get_application(application_id: str):
    """
    Fetch a stored application.

    Args:
        application_id: The application id

    Returns:
        The stored application, or 404
    """
    stored = store.get(application_id)
    if stored is None:
        return jsonify({'error': 'Application not found'}), 404

    log_application_viewed(application_id, actor_id=get_client_ip())
    return jsonify(stored.to_dict()), 200


# Error handlers
@main_bp.app_errorhandler(404)
def not_found(error):
    """Handle 404 errors."""
    return jsonify({'error': 'Not found'}), 404


@main_bp.app_errorhandler(405)
def method_not_allowed(error):
    """Handle 405 errors."""
    return jsonify({'error': 'Method not allowed'}), 405


@main_bp.app_errorhandler(429)
def rate_limit_handler(error):
    """Handle rate limit errors."""
    return jsonify({'error': 'Rate limit exceeded. Please try again later.'}), 429


@main_bp.app_errorhandler(500)
def internal_error(error):
    """Handle 500 errors."""
    db.session.rollback()
    return jsonify({'error': 'Internal server error'}), 500
