import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from main import app, get_session
from models import Course, User
from storage import SQLStorage

# Use StaticPool to share the same in-memory database across the same process
engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)


def get_test_session():
    with Session(engine) as session:
        yield session


app.dependency_overrides[get_session] = get_test_session


@pytest.fixture(name="session")
def session_fixture():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="storage")
def storage_fixture(session):
    return SQLStorage(session)


@pytest.fixture(name="users")
def users_fixture(storage):
    # Created in order, so ids are 1..4
    names = [("alice", "Alice Adams"), ("bob", "Bob Burns"), ("carol", "Carol Chen"), ("dave", "Dave Diaz")]
    return [storage.create_user(User(username=u, full_name=n, handicap=10)) for u, n in names]


@pytest.fixture(name="course")
def course_fixture(storage):
    return storage.create_course(Course(name="Torrey Pines Golf Course", location="La Jolla, CA", rating=4))


@pytest.fixture(name="client")
def client_fixture(session):
    return TestClient(app)
