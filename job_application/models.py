"""
Database models for the job application service.

Applications are insert-only: a row is written once when a submission
passes validation and is never updated or deleted.
"""

import json
from job_application import db
from job_application.record import ApplicationRecord, StoredApplication
from job_application.utils import calculate_sha256, format_timestamp, utc_now


class Application(db.Model):
    """
    A submitted job application.
    """
    __tablename__ = 'applications'

    id = db.Column(db.String(36), primary_key=True)

    # Set once at creation
    submitted_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    # Normalized record as JSON
    payload_json = db.Column(db.Text, nullable=False)

    def __repr__(self):
        return f'<Application {self.id}>'

    def get_payload(self):
        """Deserialize the JSON payload."""
        return json.loads(self.payload_json)

    def set_payload(self, payload):
        """Serialize the payload to JSON with stable ordering."""
        self.payload_json = json.dumps(payload, indent=2, sort_keys=True)

    def to_stored(self) -> StoredApplication:
        return StoredApplication(
            id=self.id,
            submitted_at=format_timestamp(self.submitted_at),
            record=ApplicationRecord.from_dict(self.get_payload())
        )


class AuditLog(db.Model):
    """
    Immutable audit trail for submission events.

    This table is append-only. Records are never modified or deleted.
    """
    __tablename__ = 'audit_logs'

    id = db.Column(db.Integer, primary_key=True)

    timestamp = db.Column(db.DateTime, default=utc_now, nullable=False)

    actor_type = db.Column(db.String(20), nullable=False)  # 'user', 'system'
    actor_id = db.Column(db.String(100), nullable=True)  # IP address or None for system

    action = db.Column(db.String(50), nullable=False)
    action_category = db.Column(db.String(20), nullable=False)

    application_id = db.Column(db.String(36), db.ForeignKey('applications.id'), nullable=True)
    resource_type = db.Column(db.String(50), nullable=False)
    resource_id = db.Column(db.String(100), nullable=True)

    details_json = db.Column(db.Text, nullable=True)

    success = db.Column(db.Boolean, nullable=False)
    error_message = db.Column(db.Text, nullable=True)

    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(500), nullable=True)

    integrity_hash = db.Column(db.String(64), nullable=False)

    def __repr__(self):
        return f'<AuditLog {self.id} - {self.action} by {self.actor_type}>'

    def to_dict(self):
        """Convert audit log to dictionary."""
        return {
            'id': self.id,
            'timestamp': format_timestamp(self.timestamp),
            'actor_type': self.actor_type,
            'actor_id': self.actor_id,
            'action': self.action,
            'action_category': self.action_category,
            'resource_type': self.resource_type,
            'resource_id': self.resource_id,
            'application_id': self.application_id,
            'details': json.loads(self.details_json) if self.details_json else None,
            'success': self.success,
            'error_message': self.error_message
        }

    def compute_integrity_hash(self):
        """Compute hash of this record's content for tamper detection."""
        content = f"{self.timestamp}{self.actor_type}{self.actor_id}{self.action}{self.resource_type}{self.resource_id}{self.details_json}"
        return calculate_sha256(content.encode())

    def verify_integrity(self):
        """Verify this record has not been tampered with."""
        return self.integrity_hash == self.compute_integrity_hash()
