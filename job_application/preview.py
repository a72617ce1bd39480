"""
Preview Module

Builds the read-only summary shown on the preview step before submission.
Output is plain data; rendering and escaping belong to the caller.

Sponsorship details only appear when work authorization is 'no', and the
optional links only appear when they were provided.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any

from job_application.record import ApplicationRecord
from job_application.utils import format_yes_no, display_text


@dataclass
class PreviewItem:
    """A single labelled value."""
    label: str
    value: str


@dataclass
class PreviewSection:
    """A titled group of preview items."""
    title: str
    items: List[PreviewItem] = field(default_factory=list)

    def add(self, label: str, value: Any):
        self.items.append(PreviewItem(label, display_text(value)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'items': [{'label': i.label, 'value': i.value} for i in self.items]
        }


def build_preview(record: ApplicationRecord) -> List[PreviewSection]:
    """
    Build the preview summary for an application.

    Args:
        record: The in-progress application

    Returns:
        Sections in form order
    """
    personal = record.personal_info
    eligibility = record.work_eligibility
    experience = record.experience

    personal_section = PreviewSection('Personal Information')
    personal_section.add('Name', personal.full_name)
    personal_section.add('Email', personal.email)
    personal_section.add('Phone', personal.phone)

    eligibility_section = PreviewSection('Work Eligibility')
    eligibility_section.add('Work Authorization', format_yes_no(eligibility.work_auth))
    if eligibility.work_auth == 'no':
        eligibility_section.add('Needs Sponsorship', format_yes_no(eligibility.sponsorship_needed))
        eligibility_section.add('Explanation', eligibility.explanation or '')

    experience_section = PreviewSection('Experience')
    experience_section.add('Years of Experience', experience.years_experience)
    if experience.portfolio_url:
        experience_section.add('Portfolio', experience.portfolio_url)
    if experience.resume_url:
        experience_section.add('Resume', experience.resume_url)

    return [personal_section, eligibility_section, experience_section]
