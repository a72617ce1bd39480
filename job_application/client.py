"""
HTTP client for the job application API.

Used by the step controller as its submission collaborator. Server-side
validation rejections surface as ValidationFailure; anything else that
prevents a submission from being accepted surfaces as SubmissionFailure.
"""

import logging
import os
from typing import Any, Dict, Optional

import requests

from job_application.record import StoredApplication
from job_application.validation import ValidationFailure, ValidationResult

logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'http://localhost:5000'
DEFAULT_TIMEOUT = 10


class ApplicationClientError(Exception):
    """Base class for client errors."""


class SubmissionFailure(ApplicationClientError):
    """The submission could not be delivered or was not accepted."""


class ApplicationNotFound(ApplicationClientError):
    """No stored application has the requested identifier."""


class ApplicationClient:
    """Thin wrapper over the /api/applications endpoints."""

    def __init__(self, base_url: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        if base_url is None:
            base_url = os.environ.get('JOB_APPLICATION_API_URL', DEFAULT_API_URL)
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f'{self.base_url}/api/applications{path}'

    def validate_application(self, payload: Dict[str, Any]) -> ValidationResult:
        """Ask the server to validate a (possibly partial) application."""
        try:
            response = self.session.post(self._url('/validate'), json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning('Validation request failed: %s', exc)
            raise ApplicationClientError('Failed to validate application') from exc

        return ValidationResult(errors=dict(body.get('errors') or {}))

    def submit_application(self, payload: Dict[str, Any]) -> str:
        """
        Submit a complete application.

        Args:
            payload: The application record

        Returns:
            The identifier assigned by the server

        Raises:
            ValidationFailure: The server rejected the record (400)
            SubmissionFailure: Network error or any other non-success reply
        """
        try:
            response = self.session.post(self._url(''), json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning('Submission request failed: %s', exc)
            raise SubmissionFailure('Failed to submit application') from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        errors = body.get('errors')
        if response.status_code == 400 and isinstance(errors, dict):
            raise ValidationFailure(errors, body.get('error') or 'Validation failed')

        if not response.ok:
            logger.warning('Submission rejected with status %s', response.status_code)
            raise SubmissionFailure(str(body.get('error') or 'Submission failed'))

        application_id = body.get('id')
        if not application_id:
            raise SubmissionFailure('Submission response did not include an application id')

        return application_id

    def get_application(self, application_id: str) -> StoredApplication:
        """Fetch a stored application by identifier."""
        try:
            response = self.session.get(self._url(f'/{application_id}'), timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning('Fetch request failed: %s', exc)
            raise ApplicationClientError('Failed to fetch application') from exc

        if response.status_code == 404:
            raise ApplicationNotFound('Application not found')

        try:
            response.raise_for_status()
            return StoredApplication.from_dict(response.json())
        except (requests.RequestException, ValueError, KeyError) as exc:
            raise ApplicationClientError('Failed to fetch application') from exc
