"""
Tests for database.py - resolution history storage.
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from profilefinder.database import (
    ProfileRow,
    get_session,
    init_database,
    last_resolved_at,
    load_resolution,
    save_resolution,
)
from profilefinder.profile import ProfileRecord


class TestDatabaseInit:
    """Test database initialization."""

    def test_init_creates_database_file(self, tmp_path):
        db_path = tmp_path / "test.db"
        assert not db_path.exists()

        init_database(db_path)

        assert db_path.exists()

    def test_init_creates_tables(self, tmp_path):
        db_path = tmp_path / "test.db"
        init_database(db_path)

        session = get_session(db_path)
        assert session.query(ProfileRow).count() == 0
        session.close()

    def test_init_creates_parent_directories(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "test.db"
        assert not db_path.parent.exists()

        init_database(db_path)

        assert db_path.exists()


class TestResolutionHistory:
    """Test saving and loading resolutions."""

    @pytest.fixture
    def db_session(self, tmp_path):
        db_path = tmp_path / "test.db"
        init_database(db_path)
        session = get_session(db_path)
        yield session
        session.close()

    @pytest.fixture
    def sample_result(self):
        return {
            "flickr": ProfileRecord(user_id="1@N01", user_name="stewart", location="Vancouver"),
            "twitter": ProfileRecord(user_name="stewart", portrait_url="http://overtar.appspot.com/stewart%40twitter"),
            "aim": ProfileRecord(user_name="stew"),
        }

    def test_save_and_load(self, db_session, sample_result):
        written = save_resolution(db_session, "stewart@example.com", sample_result)

        assert written == 3
        loaded = load_resolution(db_session, "stewart@example.com")
        assert dict(loaded) == sample_result
        assert list(loaded) == ["flickr", "twitter", "aim"]

    def test_email_is_normalized(self, db_session, sample_result):
        save_resolution(db_session, "  Stewart@Example.COM", sample_result)
        assert len(load_resolution(db_session, "stewart@example.com")) == 3

    def test_save_replaces_previous(self, db_session, sample_result):
        save_resolution(db_session, "stewart@example.com", sample_result)
        save_resolution(db_session, "stewart@example.com", {"google": ProfileRecord(display_name="Stewart")})

        loaded = load_resolution(db_session, "stewart@example.com")
        assert list(loaded) == ["google"]

    def test_empty_result(self, db_session):
        assert save_resolution(db_session, "nobody@example.com", {}) == 0
        assert load_resolution(db_session, "nobody@example.com") == {}

    def test_unknown_email(self, db_session):
        assert load_resolution(db_session, "unknown@example.com") == {}
        assert last_resolved_at(db_session, "unknown@example.com") is None

    def test_last_resolved_at(self, db_session, sample_result):
        when = datetime(2024, 5, 1, 12, 30)
        save_resolution(db_session, "stewart@example.com", sample_result, resolved_at=when)
        assert last_resolved_at(db_session, "stewart@example.com") == when

        later = when + timedelta(days=1)
        save_resolution(db_session, "stewart@example.com", sample_result, resolved_at=later)
        assert last_resolved_at(db_session, "stewart@example.com") == later

    def test_unique_email_service(self, db_session):
        db_session.add(ProfileRow(email="a@b.com", service="aim"))
        db_session.add(ProfileRow(email="a@b.com", service="aim"))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_row_to_record(self):
        row = ProfileRow(email="a@b.com", service="aim", user_name="jd", user_id=None)
        assert row.to_record() == ProfileRecord(user_name="jd")
