"""
Pytest fixtures for the messaging backend tests.

Usage:
    pytest tests/
"""
import os
import tempfile
import pytest
from typing import Generator

# Set test environment before importing app modules
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="messaging-uploads-"))

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from db import Base, get_db
from main import app
from models.auth.student_models import Student
from models.auth.teacher_models import Teacher
from models.classroom.classroom_models import Classroom, ClassTeacher


# In-memory SQLite for fast tests (no external DB dependency)
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.
    Tables are created before and dropped after each test.
    """
    Base.metadata.create_all(bind=test_engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """
    FastAPI test client with overridden database dependency.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ============================================================================
# Enrollment Fixtures
# ============================================================================

@pytest.fixture
def enrollment(db_session: Session) -> Session:
    """
    Roster used across the tests:

    - c1: teachers t1, t3; students s1, s2
    - c2: teachers t2, t3; student s3
    - s4 has no class, t4 teaches nothing
    """
    db_session.add_all([
        Classroom(class_id="c1", name="Grade 5 A"),
        Classroom(class_id="c2", name="Grade 6 B"),
    ])
    db_session.add_all([
        Teacher(teacher_id="t1", first_name="Ada", last_name="Lovelace", profile_photo="uploads/teacher/t1.png"),
        Teacher(teacher_id="t2", first_name="Alan", last_name="Turing"),
        Teacher(teacher_id="t3", first_name="Grace", last_name="Hopper"),
        Teacher(teacher_id="t4", first_name="Edsger", last_name="Dijkstra"),
    ])
    db_session.add_all([
        ClassTeacher(class_id="c1", teacher_id="t1", position=0),
        ClassTeacher(class_id="c1", teacher_id="t3", position=1),
        ClassTeacher(class_id="c2", teacher_id="t2", position=0),
        ClassTeacher(class_id="c2", teacher_id="t3", position=1),
    ])
    db_session.add_all([
        Student(student_id="s1", first_name="Sam", last_name="One", class_id="c1"),
        Student(student_id="s2", first_name="Sue", last_name="Two", class_id="c1"),
        Student(student_id="s3", first_name="Sid", last_name="Three", class_id="c2"),
        Student(student_id="s4", first_name="Sky", last_name="Four"),
    ])
    db_session.commit()
    return db_session


@pytest.fixture
def auth_headers():
    """Identity headers the external auth layer would attach."""
    def _headers(user_id: str, role: str) -> dict:
        return {"X-User-Id": user_id, "X-User-Role": role}
    return _headers
