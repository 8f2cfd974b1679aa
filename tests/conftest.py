"""
Pytest configuration and shared fixtures.
"""

import pytest
from typing import Dict, Any, List

from freelancematch.logger import get_logger

# Quiet global logger before any module grabs it
get_logger(enable_file=False, enable_console=False)

from freelancematch.database import init_database, get_session  # noqa: E402
from freelancematch.storage import add_freelancer  # noqa: E402


@pytest.fixture
def sample_freelancer_record() -> Dict[str, Any]:
    """Valid freelancer record as found in seed files."""
    return {
        "username": "sara.ahmed",
        "email": "sara@example.com",
        "display_name": "Sara Ahmed",
        "profession": "Web Developer",
        "skills": ["JavaScript", "React", "Node.js"],
        "bio": "Sara Ahmed is a skilled web developer with a focus on React.",
        "hourly_rate": 45,
        "years_of_experience": 7,
        "location": "Erbil, Iraq",
        "job_performance": 95,
        "skills_experience": 90,
        "responsiveness": 88,
        "fairness_score": 92,
    }


@pytest.fixture
def invalid_freelancer_record() -> Dict[str, Any]:
    """Freelancer record missing required fields."""
    return {
        "profession": "Designer",
        # Missing bio, location and skills
        "job_performance": "high",
    }


@pytest.fixture
def freelancer_records() -> List[Dict[str, Any]]:
    """A small marketplace of freelancers with distinct profiles."""
    return [
        {
            "username": "sara.ahmed",
            "email": "sara@example.com",
            "display_name": "Sara Ahmed",
            "profession": "Web Developer",
            "skills": ["JavaScript", "React", "Node.js"],
            "bio": "Sara Ahmed is a skilled web developer.",
            "location": "Erbil, Iraq",
            "years_of_experience": 7,
            "job_performance": 95,
            "skills_experience": 90,
            "responsiveness": 88,
            "fairness_score": 92,
        },
        {
            "profession": "Graphic Designer",
            "skills": ["Photoshop", "Illustrator", "Branding"],
            "bio": "Karwan Ali is a creative graphic designer.",
            "location": "Sulaymaniyah, Iraq",
            "years_of_experience": 4,
            "job_performance": 85,
            "skills_experience": 80,
            "responsiveness": 90,
            "fairness_score": 70,
        },
        {
            "profession": "Content Writer",
            "skills": ["Copywriting", "SEO", "Blogging"],
            "bio": "Writes long-form articles for technology companies.",
            "location": "Remote",
            "years_of_experience": 3,
            "job_performance": 70,
            "skills_experience": 60,
            "responsiveness": 75,
            "fairness_score": 95,
        },
        {
            "profession": "Mobile Developer",
            "skills": ["React Native", "Swift", "Kotlin"],
            "bio": "Dilan Omar is a mobile developer shipping apps since 2015.",
            "location": "Duhok, Iraq",
            "years_of_experience": 9,
            "job_performance": 90,
            "skills_experience": 80,
            "responsiveness": 70,
            "fairness_score": 75,
        },
    ]


@pytest.fixture
def db_session(tmp_path):
    """Empty temporary database session."""
    db_path = tmp_path / "test.db"
    init_database(db_path)
    session = get_session(db_path)
    yield session
    session.close()


@pytest.fixture
def seeded_session(db_session, freelancer_records):
    """Database session holding the freelancer_records marketplace."""
    for record in freelancer_records:
        add_freelancer(db_session, record)
    db_session.commit()
    return db_session


@pytest.fixture
def valid_job_request() -> Dict[str, Any]:
    """Detailed job request that needs no clarification."""
    return {
        "description": (
            "I need a web developer with React experience to build a booking "
            "dashboard. Budget is $2000 and the deadline is in six weeks."
        ),
        "skills": ["React", "JavaScript"],
        "budget": 2000,
        "timeline": "6 weeks",
    }
