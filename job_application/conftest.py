import copy

import pytest

from job_application import create_app, db


VALID_PAYLOAD = {
    'personalInfo': {
        'firstName': 'John',
        'lastName': 'Doe',
        'email': 'john.doe@example.com',
        'phone': '555-123-4567'
    },
    'workEligibility': {
        'workAuth': 'yes'
    },
    'experience': {
        'yearsExperience': 5,
        'portfolioUrl': 'https://johndoe.dev',
        'resumeUrl': 'https://example.com/resume.pdf'
    }
}


@pytest.fixture
def app():
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'RATELIMIT_ENABLED': False,
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def valid_payload():
    return copy.deepcopy(VALID_PAYLOAD)
