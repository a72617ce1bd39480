"""
Step Controller Module

Owns the in-progress application and the current step of the multi-step
form. Steps 1-3 each map to one section of the record and step 4 is a
read-only preview. Moving forward requires the current section to pass
validation; moving back never does. Submission re-validates the whole
record before it is handed to the submission collaborator.

The controller is the only writer of its record. Apart from submit(), every
operation runs to completion immediately.
"""

import logging
import threading
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, Dict, List, Optional

from job_application.client import ApplicationClientError
from job_application.preview import PreviewSection, build_preview
from job_application.record import ApplicationRecord, FIELD_ATTRIBUTES
from job_application.validation import (
    CONDITIONAL_FIELDS, EXPERIENCE, PERSONAL_INFO, WORK_ELIGIBILITY,
    ValidationFailure, coerce_years, validate_application, validate_field,
    validate_section
)

logger = logging.getLogger(__name__)


class Step(IntEnum):
    """Form steps in display order."""
    PERSONAL_INFO = 1
    WORK_ELIGIBILITY = 2
    EXPERIENCE = 3
    PREVIEW = 4


FIRST_STEP = Step.PERSONAL_INFO
LAST_STEP = Step.PREVIEW

STEP_SECTIONS = {
    Step.PERSONAL_INFO: PERSONAL_INFO,
    Step.WORK_ELIGIBILITY: WORK_ELIGIBILITY,
    Step.EXPERIENCE: EXPERIENCE,
}


@dataclass
class SubmitResult:
    """Outcome of a submit() call."""
    submitted: bool
    application_id: Optional[str] = None
    errors: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None


class StepController:
    """
    State machine for the multi-step application form.

    Args:
        submit_application: Callable that delivers a record dict and returns
            the stored application's id. It may raise ValidationFailure or
            ApplicationClientError, e.g. ApplicationClient.submit_application.
    """

    def __init__(self, submit_application: Callable[[Dict[str, Any]], str]):
        self._submit_application = submit_application
        self._submit_lock = threading.Lock()
        self.reset()

    @property
    def current_step(self) -> Step:
        return self._step

    @property
    def record(self) -> ApplicationRecord:
        """A copy of the in-progress record."""
        return self._record.copy()

    @property
    def errors(self) -> Dict[str, str]:
        """Errors surfaced by the last failed next() or submit()."""
        return dict(self._errors)

    @property
    def submission_error(self) -> Optional[str]:
        return self._submission_error

    @property
    def application_id(self) -> Optional[str]:
        return self._application_id

    @property
    def is_submitted(self) -> bool:
        return self._application_id is not None

    @property
    def is_submitting(self) -> bool:
        return self._submit_lock.locked()

    def _section_errors(self, step: Step) -> Dict[str, str]:
        section_name = STEP_SECTIONS.get(step)
        if section_name is None:
            return {}
        return validate_section(section_name, self._record.to_dict()[section_name])

    def update_field(self, name: str, value: Any):
        """
        Write a form value into the record.

        Setting workAuth to anything other than 'no' clears
        sponsorshipNeeded and explanation. yearsExperience is parsed from
        text; blank input leaves it unset.
        """
        if name not in FIELD_ATTRIBUTES:
            raise ValueError(f'Unknown field: {name}')

        if self.is_submitted:
            logger.warning('Ignoring update to %s after submission', name)
            return

        if name == 'yearsExperience':
            value = coerce_years(value)

        self._record.set_field(name, value)
        changed = [name]

        if name == 'workAuth' and value != 'no':
            for dependent in CONDITIONAL_FIELDS:
                self._record.set_field(dependent, None)
            changed.extend(CONDITIONAL_FIELDS)

        for changed_name in changed:
            self._errors.pop(changed_name, None)

    def validate_field(self, name: str, value: Any) -> Optional[str]:
        """Live feedback for one input, using the record's current workAuth."""
        return validate_field(name, value, work_auth=self._record.get_field('workAuth'))

    def is_current_step_valid(self) -> bool:
        """Whether the current step would allow next() or submit()."""
        return not self._section_errors(self._step)

    def next(self) -> Dict[str, str]:
        """
        Advance one step if the current section is valid.

        Returns:
            The current section's errors (bare field names) when it is
            invalid, in which case the step does not change; otherwise {}
        """
        if self.is_submitted:
            return {}

        errors = self._section_errors(self._step)
        if errors:
            self._errors = errors
            logger.debug('Step %s blocked by %d error(s)', int(self._step), len(errors))
            return dict(errors)

        self._errors = {}
        if self._step < LAST_STEP:
            self._step = Step(self._step + 1)
        return {}

    def prev(self) -> bool:
        """Go back one step without validating. Returns False at step 1."""
        if self.is_submitted or self._step <= FIRST_STEP:
            return False

        self._step = Step(self._step - 1)
        self._errors = {}
        return True

    def preview(self) -> List[PreviewSection]:
        return build_preview(self._record)

    def submit(self) -> SubmitResult:
        """
        Submit the application from the preview step.

        The whole record is validated first; an invalid record never reaches
        the submission collaborator. Only one submission may be in flight.
        On any failure the controller stays on the preview step with the
        record intact.
        """
        if self.is_submitted:
            return SubmitResult(False, error='Application has already been submitted')

        if self._step != Step.PREVIEW:
            return SubmitResult(False, error='Submission is only available from the preview step')

        if not self._submit_lock.acquire(blocking=False):
            return SubmitResult(False, error='A submission is already in progress')

        try:
            self._submission_error = None

            result = validate_application(self._record.to_dict())
            if not result.valid:
                self._errors = dict(result.errors)
                logger.info('Submission blocked by %d validation error(s)', len(result.errors))
                return SubmitResult(False, errors=dict(result.errors))

            try:
                application_id = self._submit_application(self._record.to_dict())
            except ValidationFailure as e:
                self._errors = dict(e.errors)
                logger.info('Submission rejected by server validation')
                return SubmitResult(False, errors=dict(e.errors), error=str(e))
            except ApplicationClientError as e:
                self._submission_error = str(e)
                logger.warning('Submission failed: %s', e)
                return SubmitResult(False, error=str(e))

            self._application_id = application_id
            self._errors = {}
            logger.info('Application %s submitted', application_id)
            return SubmitResult(True, application_id=application_id)
        finally:
            self._submit_lock.release()

    def reset(self):
        """Discard all input and return to an empty form on step 1."""
        self._record = ApplicationRecord()
        self._step = FIRST_STEP
        self._errors: Dict[str, str] = {}
        self._submission_error: Optional[str] = None
        self._application_id: Optional[str] = None
