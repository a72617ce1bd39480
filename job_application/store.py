"""
Storage for accepted applications.

Append-only: save() inserts one row per freshly generated identifier and
get() reads it back. There is no update or delete.
"""

from typing import Optional

from job_application import db
from job_application.models import Application
from job_application.record import ApplicationRecord, StoredApplication
from job_application.utils import generate_application_id, utc_now


class ApplicationStore:
    """Put/get access to stored applications."""

    def save(self, record: ApplicationRecord) -> StoredApplication:
        """
        Persist a validated record under a new identifier.

        Args:
            record: An application that has passed whole-record validation

        Returns:
            The stored application with its id and submission timestamp
        """
        application = Application(
            id=generate_application_id(),
            submitted_at=utc_now()
        )
        application.set_payload(record.to_dict())
        db.session.add(application)
        db.session.commit()
        return application.to_stored()

    def get(self, application_id: str) -> Optional[StoredApplication]:
        """Return the stored application, or None if the id is unknown."""
        application = db.session.get(Application, application_id)
        if application is None:
            return None
        return application.to_stored()
