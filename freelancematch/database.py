"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for users, freelancers and reviews.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

from .match_score import FreelancerMetrics

Base = declarative_base()


class User(Base):
    """Platform account. Freelancers and clients are both users."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, nullable=False, unique=True)
    email = Column(String, nullable=False, unique=True)
    display_name = Column(String, nullable=True)
    is_client = Column(Boolean, nullable=False, default=True)


class Freelancer(Base):
    """Freelancer profile with the four match metrics (stored as 0-100 integers)."""

    __tablename__ = "freelancers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    profession = Column(String, nullable=False)
    skills = Column(JSON, nullable=False, default=list)
    bio = Column(Text, nullable=False)
    hourly_rate = Column(Integer, nullable=False, default=0)
    rating = Column(Integer, nullable=False, default=0)  # 0-50, stars x 10
    job_performance = Column(Integer, nullable=False, default=0)
    skills_experience = Column(Integer, nullable=False, default=0)
    responsiveness = Column(Integer, nullable=False, default=0)
    fairness_score = Column(Integer, nullable=False, default=0)
    completed_jobs = Column(Integer, nullable=False, default=0)
    years_of_experience = Column(Integer, nullable=True)
    location = Column(String, nullable=False)
    availability = Column(Boolean, nullable=False, default=True)
    image_url = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    user = relationship("User")

    @property
    def metrics(self) -> FreelancerMetrics:
        return FreelancerMetrics.from_record(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "profession": self.profession,
            "skills": list(self.skills or []),
            "bio": self.bio,
            "hourlyRate": self.hourly_rate,
            "yearsOfExperience": self.years_of_experience,
            "rating": self.rating,
            "jobPerformance": self.job_performance,
            "skillsExperience": self.skills_experience,
            "responsiveness": self.responsiveness,
            "fairnessScore": self.fairness_score,
            "completedJobs": self.completed_jobs or 0,
            "location": self.location,
            "availability": self.availability,
            "imageUrl": self.image_url,
        }


class Review(Base):
    """Client review of a freelancer (1-5 stars)."""

    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    freelancer_id = Column(Integer, ForeignKey("freelancers.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Session = sessionmaker(bind=engine)
    return Session()
