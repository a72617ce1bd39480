"""
Application Record Module

Normalizes raw application payloads into typed sections and back into the
camelCase wire format. Unknown keys are dropped; values are kept as given so
that validation can report on them.
"""

import copy
from dataclasses import dataclass, field
from typing import Dict, Any, Tuple


def _section(data: Any) -> Dict[str, Any]:
    if isinstance(data, dict):
        return data
    return {}


@dataclass
class PersonalInfo:
    """Step 1: who the applicant is."""
    first_name: Any = ''
    last_name: Any = ''
    email: Any = ''
    phone: Any = ''

    @classmethod
    def from_dict(cls, data: Any) -> 'PersonalInfo':
        data = _section(data)
        return cls(
            first_name=data.get('firstName', ''),
            last_name=data.get('lastName', ''),
            email=data.get('email', ''),
            phone=data.get('phone', '')
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'firstName': self.first_name,
            'lastName': self.last_name,
            'email': self.email,
            'phone': self.phone,
        }

    @property
    def full_name(self) -> str:
        parts = [p for p in [self.first_name, self.last_name] if isinstance(p, str) and p]
        return ' '.join(parts)


@dataclass
class WorkEligibility:
    """Step 2: work authorization, with sponsorship details when needed."""
    work_auth: Any = ''
    sponsorship_needed: Any = None
    explanation: Any = None

    @classmethod
    def from_dict(cls, data: Any) -> 'WorkEligibility':
        data = _section(data)
        return cls(
            work_auth=data.get('workAuth', ''),
            sponsorship_needed=data.get('sponsorshipNeeded'),
            explanation=data.get('explanation')
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {'workAuth': self.work_auth}
        # sponsorship and explanation only apply when workAuth is 'no'
        if self.work_auth != 'no':
            return result
        if self.sponsorship_needed is not None:
            result['sponsorshipNeeded'] = self.sponsorship_needed
        if self.explanation is not None:
            result['explanation'] = self.explanation
        return result


@dataclass
class Experience:
    """Step 3: experience and optional links."""
    years_experience: Any = None
    portfolio_url: Any = ''
    resume_url: Any = ''

    @classmethod
    def from_dict(cls, data: Any) -> 'Experience':
        data = _section(data)
        years = data.get('yearsExperience')
        return cls(
            years_experience=None if years == '' else years,
            portfolio_url=data.get('portfolioUrl'),
            resume_url=data.get('resumeUrl')
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {'yearsExperience': self.years_experience}
        if self.portfolio_url is not None:
            result['portfolioUrl'] = self.portfolio_url
        if self.resume_url is not None:
            result['resumeUrl'] = self.resume_url
        return result


# Form field name -> (record attribute, section attribute)
FIELD_ATTRIBUTES: Dict[str, Tuple[str, str]] = {
    'firstName': ('personal_info', 'first_name'),
    'lastName': ('personal_info', 'last_name'),
    'email': ('personal_info', 'email'),
    'phone': ('personal_info', 'phone'),
    'workAuth': ('work_eligibility', 'work_auth'),
    'sponsorshipNeeded': ('work_eligibility', 'sponsorship_needed'),
    'explanation': ('work_eligibility', 'explanation'),
    'yearsExperience': ('experience', 'years_experience'),
    'portfolioUrl': ('experience', 'portfolio_url'),
    'resumeUrl': ('experience', 'resume_url'),
}


@dataclass
class ApplicationRecord:
    """The full form payload."""
    personal_info: PersonalInfo = field(default_factory=PersonalInfo)
    work_eligibility: WorkEligibility = field(default_factory=WorkEligibility)
    experience: Experience = field(default_factory=Experience)

    @classmethod
    def from_dict(cls, payload: Any) -> 'ApplicationRecord':
        payload = _section(payload)
        return cls(
            personal_info=PersonalInfo.from_dict(payload.get('personalInfo')),
            work_eligibility=WorkEligibility.from_dict(payload.get('workEligibility')),
            experience=Experience.from_dict(payload.get('experience'))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'personalInfo': self.personal_info.to_dict(),
            'workEligibility': self.work_eligibility.to_dict(),
            'experience': self.experience.to_dict(),
        }

    def get_field(self, name: str) -> Any:
        record_attr, section_attr = FIELD_ATTRIBUTES[name]
        return getattr(getattr(self, record_attr), section_attr)

    def set_field(self, name: str, value: Any):
        """Write a form field into its section. Raises KeyError for unknown names."""
        record_attr, section_attr = FIELD_ATTRIBUTES[name]
        setattr(getattr(self, record_attr), section_attr, value)

    def copy(self) -> 'ApplicationRecord':
        return copy.deepcopy(self)


@dataclass
class StoredApplication:
    """An accepted application with its server-assigned identity."""
    id: str
    submitted_at: str
    record: ApplicationRecord

    def to_dict(self) -> Dict[str, Any]:
        result = self.record.to_dict()
        result['id'] = self.id
        result['submittedAt'] = self.submitted_at
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StoredApplication':
        return cls(
            id=data['id'],
            submitted_at=data['submittedAt'],
            record=ApplicationRecord.from_dict(data)
        )
