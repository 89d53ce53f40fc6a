import pytest
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

# Fixture emails use the reserved ".test" domain; email-validator documents
# removing it from SPECIAL_USE_DOMAIN_NAMES for test suites.
import email_validator
if "test" in email_validator.SPECIAL_USE_DOMAIN_NAMES:
    email_validator.SPECIAL_USE_DOMAIN_NAMES.remove("test")

from hr_portal.database import Base, get_db
from hr_portal.main import app
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def db_session():
    """Get a clean database session for each test function with rollback safety."""
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()

def _make_user(db_session, email, role, password="Password123!", full_name=None):
    from hr_portal.models.user import User
    from hr_portal.services import auth as auth_service

    user = User(
        email=email,
        hashed_password=auth_service.get_password_hash(password),
        role=role,
        is_active=True,
        is_verified=True,
        full_name=full_name,
    )
    db_session.add(user)
    db_session.commit()
    return user

@pytest.fixture(scope="function")
def admin_user(db_session):
    """Create a default admin user for tests."""
    from hr_portal.models.user import UserRole
    return _make_user(db_session, "admin@hrportal.test", UserRole.ADMIN, "AdminPassword123!", "System Admin")

@pytest.fixture(scope="function")
def hr_user(db_session):
    from hr_portal.models.user import UserRole
    return _make_user(db_session, "hr@hrportal.test", UserRole.HR, full_name="Harriet Ross")

@pytest.fixture(scope="function")
def make_employee(db_session):
    """Factory for an employee profile, optionally with a login account."""
    from hr_portal.models.employee import Employee
    from hr_portal.models.user import UserRole

    def _make_employee(email, name="Test Employee", department="Engineering", with_user=True):
        user = _make_user(db_session, email, UserRole.EMPLOYEE, full_name=name) if with_user else None
        employee = Employee(
            name=name,
            email=email,
            department=department,
            designation="Engineer",
            user_id=user.id if user else None,
        )
        db_session.add(employee)
        db_session.commit()
        return employee
    return _make_employee

@pytest.fixture(scope="function")
def employee(make_employee):
    """An employee with a linked login account."""
    return make_employee("jane@hrportal.test", name="Jane Doe")

@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens."""
    from hr_portal.services.auth import create_access_token

    def _get_token(user):
        return create_access_token(data={
            "sub": user.email,
            "role": user.role.value,
            "user_id": user.id,
        })
    return _get_token

@pytest.fixture(scope="function")
def auth_headers(get_token):
    def _auth_headers(user):
        return {"Authorization": f"Bearer {get_token(user)}"}
    return _auth_headers

@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
