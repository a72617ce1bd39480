"""
Audit logging module for immutable audit trail.

Submission events are logged with integrity verification.
This module is append-only - records are never modified or deleted.
"""

import json
from typing import Dict, Any, Optional
from flask import request, current_app

from job_application import db
from job_application.models import AuditLog
from job_application.utils import utc_now


class AuditAction:
    """Constants for audit actions."""
    APPLICATION_CREATED = 'application_created'
    APPLICATION_VIEWED = 'application_viewed'
    VALIDATION_FAILED = 'validation_failed'


class AuditCategory:
    """Constants for audit action categories."""
    CREATE = 'create'
    READ = 'read'
    SYSTEM = 'system'


def log_action(
    action: str,
    action_category: str,
    resource_type: str,
    resource_id: Optional[str] = None,
    application_id: Optional[str] = None,
    actor_type: str = 'system',
    actor_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    success: bool = True,
    error_message: Optional[str] = None
) -> Optional[AuditLog]:
    """
    Log an action to the audit trail.

    Args:
        action: The action performed (use AuditAction constants)
        action_category: Category of action (use AuditCategory constants)
        resource_type: Type of resource affected
        resource_id: Identifier of the resource
        application_id: Associated application id if applicable
        actor_type: Type of actor ('user', 'system')
        actor_id: Identifier of the actor (IP address)
        details: Additional structured details
        success: Whether the action succeeded
        error_message: Error message if action failed

    Returns:
        The created AuditLog record, or None if auditing is disabled or failed
    """
    if not current_app.config.get('AUDIT_LOG_ENABLED', True):
        return None

    try:
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

        audit_log = AuditLog(
            timestamp=utc_now(),
            action=action,
            action_category=action_category,
            resource_type=resource_type,
            resource_id=str(resource_id) if resource_id else None,
            application_id=application_id,
            actor_type=actor_type,
            actor_id=actor_id,
            details_json=json.dumps(details, sort_keys=True) if details else None,
            success=success,
            error_message=error_message,
            ip_address=ip_address,
            user_agent=user_agent
        )

        audit_log.integrity_hash = audit_log.compute_integrity_hash()

        db.session.add(audit_log)
        db.session.commit()

        return audit_log

    except Exception as e:
        # Audit failures must not fail the request being audited
        db.session.rollback()
        current_app.logger.error(f'Failed to create audit log: {str(e)}')
        return None


def log_application_created(application_id: str, actor_id: str) -> Optional[AuditLog]:
    """Log acceptance of a new application."""
    return log_action(
        action=AuditAction.APPLICATION_CREATED,
        action_category=AuditCategory.CREATE,
        resource_type='application',
        resource_id=application_id,
        application_id=application_id,
        actor_type='user',
        actor_id=actor_id
    )


def log_validation_failed(errors: Dict[str, str], actor_id: str) -> Optional[AuditLog]:
    """Log a submission rejected by validation. Only field paths are recorded."""
    return log_action(
        action=AuditAction.VALIDATION_FAILED,
        action_category=AuditCategory.SYSTEM,
        resource_type='application',
        actor_type='user',
        actor_id=actor_id,
        details={'error_count': len(errors), 'fields': sorted(errors)},
        success=False
    )


def log_application_viewed(application_id: str, actor_id: str) -> Optional[AuditLog]:
    """Log retrieval of a stored application."""
    return log_action(
        action=AuditAction.APPLICATION_VIEWED,
        action_category=AuditCategory.READ,
        resource_type='application',
        resource_id=application_id,
        application_id=application_id,
        actor_type='user',
        actor_id=actor_id
    )


def verify_audit_integrity() -> tuple:
    """
    Verify integrity of all audit log records.

    Returns:
        Tuple of (valid_count, invalid_count, invalid_ids)
    """
    logs = AuditLog.query.all()
    valid_count = 0
    invalid_count = 0
    invalid_ids = []

    for log in logs:
        if log.verify_integrity():
            valid_count += 1
        else:
            invalid_count += 1
            invalid_ids.append(log.id)

    return valid_count, invalid_count, invalid_ids


def get_audit_trail_for_application(application_id: str) -> list:
    """
    Get complete audit trail for an application.

    Args:
        application_id: The application id

    Returns:
        List of audit log dictionaries
    """
    logs = AuditLog.query.filter_by(application_id=application_id) \
                         .order_by(AuditLog.timestamp.asc(), AuditLog.id.asc()) \
                         .all()
    return [log.to_dict() for log in logs]
