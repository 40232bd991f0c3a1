"""Unit tests for ProfileService."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from car_lot.models.db_models import Base
from car_lot.models.pydantic_models import ProfileUpdate
from car_lot.services.profile_service import ProfileService


@pytest.fixture
def db_session():
    """Create an in-memory database session for testing."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    session_factory = sessionmaker(bind=engine)
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def service(db_session: Session) -> ProfileService:
    return ProfileService(db_session)


class TestGetProfile:
    """Tests for ProfileService.get_profile."""

    def test_created_on_first_access(self, service: ProfileService):
        profile = service.get_profile("user1")

        assert profile.id == "user1"
        assert profile.username == "user1"
        assert profile.phone_number is None
        assert profile.created_at is not None

    def test_same_profile_on_second_access(self, service: ProfileService):
        first = service.get_profile("user1")
        second = service.get_profile("user1")

        assert first == second


class TestUpdateProfile:
    """Tests for ProfileService.update_profile."""

    def test_partial_update(self, service: ProfileService):
        service.update_profile("user1", ProfileUpdate(username="alice", bio="Hi"))

        profile = service.update_profile("user1", ProfileUpdate(phone_number="555-0100"))

        assert profile.username == "alice"
        assert profile.bio == "Hi"
        assert profile.phone_number == "555-0100"

    def test_explicit_null_clears_field(self, service: ProfileService):
        service.update_profile("user1", ProfileUpdate(company_name="Alice Motors"))

        profile = service.update_profile("user1", ProfileUpdate(company_name=None))

        assert profile.company_name is None

    def test_null_username_ignored(self, service: ProfileService):
        service.update_profile("user1", ProfileUpdate(username="alice"))

        profile = service.update_profile("user1", ProfileUpdate(username=None))

        assert profile.username == "alice"
