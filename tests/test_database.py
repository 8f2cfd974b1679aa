"""
Tests for database.py - SQLite models and connection helpers.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from freelancematch.database import Freelancer, Review, User, init_database, get_session
from freelancematch.match_score import FreelancerMetrics


class TestDatabaseInit:
    """Test database initialization."""

    def test_init_creates_database_file(self, tmp_path):
        """Test that init_database creates the database file."""
        db_path = tmp_path / "test.db"
        assert not db_path.exists()

        init_database(db_path)

        assert db_path.exists()

    def test_init_creates_tables(self, tmp_path):
        """All three tables exist and start empty."""
        db_path = tmp_path / "test.db"
        init_database(db_path)

        session = get_session(db_path)
        assert session.query(User).count() == 0
        assert session.query(Freelancer).count() == 0
        assert session.query(Review).count() == 0
        session.close()

    def test_init_creates_parent_directories(self, tmp_path):
        """Test that init_database creates parent directories if missing."""
        db_path = tmp_path / "nested" / "dir" / "test.db"

        init_database(db_path)

        assert db_path.exists()

    def test_init_is_idempotent(self, tmp_path):
        db_path = tmp_path / "test.db"
        init_database(db_path)
        init_database(db_path)
        assert db_path.exists()


class TestFreelancerModel:
    """Test the Freelancer model."""

    @pytest.fixture
    def freelancer(self, db_session):
        f = Freelancer(
            profession="Data Analyst",
            skills=["Python", "SQL"],
            bio="Builds dashboards.",
            location="Baghdad, Iraq",
            job_performance=90,
            skills_experience=80,
            responsiveness=70,
            fairness_score=75,
        )
        db_session.add(f)
        db_session.commit()
        return f

    def test_defaults(self, db_session):
        """Unset metrics default to 0 and new profiles are available."""
        f = Freelancer(profession="Editor", skills=["Proofreading"], bio="Edits.", location="Remote")
        db_session.add(f)
        db_session.commit()

        assert f.id is not None
        assert f.metrics == FreelancerMetrics(0, 0, 0, 0)
        assert f.availability is True
        assert f.rating == 0
        assert f.created_at is not None

    def test_skills_round_trip_as_json(self, db_session, freelancer):
        db_session.expire_all()
        stored = db_session.get(Freelancer, freelancer.id)
        assert stored.skills == ["Python", "SQL"]

    def test_metrics_property(self, freelancer):
        assert freelancer.metrics == FreelancerMetrics(90, 80, 70, 75)

    def test_to_dict_uses_camel_case(self, freelancer):
        data = freelancer.to_dict()
        assert data["jobPerformance"] == 90
        assert data["skillsExperience"] == 80
        assert data["fairnessScore"] == 75
        assert data["yearsOfExperience"] is None
        assert data["completedJobs"] == 0

    def test_user_relationship(self, db_session):
        user = User(username="dilan", email="dilan@example.com", display_name="Dilan Omar", is_client=False)
        db_session.add(user)
        db_session.flush()
        f = Freelancer(user_id=user.id, profession="Mobile Developer", skills=["Swift"],
                       bio="Apps.", location="Duhok")
        db_session.add(f)
        db_session.commit()

        assert f.user.display_name == "Dilan Omar"


class TestUserModel:
    """Test the User model."""

    def test_unique_username(self, db_session):
        db_session.add(User(username="sara", email="a@example.com"))
        db_session.commit()
        db_session.add(User(username="sara", email="b@example.com"))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_client_by_default(self, db_session):
        user = User(username="client", email="client@example.com")
        db_session.add(user)
        db_session.commit()
        assert user.is_client is True
