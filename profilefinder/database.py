"""
Resolution history store.

Uses SQLite with SQLAlchemy. The CLI saves each resolution here on request;
the engine itself never reads from it.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .normalize import normalize_email
from .profile import PROFILE_FIELDS, ProfileRecord, ResolutionResult, freeze_result

Base = declarative_base()


class ProfileRow(Base):
    """One service's profile from one resolution of an email address."""

    __tablename__ = "profiles"
    __table_args__ = (UniqueConstraint("email", "service", name="uq_profiles_email_service"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, nullable=False, index=True)
    service = Column(String, nullable=False)
    rank = Column(Integer, nullable=False, default=0)  # position in the merged result
    user_id = Column(String, nullable=False, default="")
    user_name = Column(String, nullable=False, default="")
    display_name = Column(String, nullable=False, default="")
    portrait_url = Column(String, nullable=False, default="")
    location = Column(String, nullable=False, default="")
    resolved_at = Column(DateTime, nullable=False, default=datetime.now)

    def to_record(self) -> ProfileRecord:
        return ProfileRecord(**{name: getattr(self, name) or "" for name in PROFILE_FIELDS})


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path = Path(db_path)
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
    engine = create_engine(f"sqlite:///{Path(db_path)}")
    Session = sessionmaker(bind=engine)
    return Session()


def save_resolution(session, email: str, result: ResolutionResult, resolved_at: Optional[datetime] = None) -> int:
    """Replace the stored profiles for ``email`` with ``result``. Returns rows written."""
    key = normalize_email(email)
    resolved_at = resolved_at or datetime.now()
    session.query(ProfileRow).filter_by(email=key).delete()
    for rank, (service, record) in enumerate(result.items()):
        session.add(ProfileRow(email=key, service=service, rank=rank, resolved_at=resolved_at, **record.to_dict()))
    session.commit()
    return len(result)


def load_resolution(session, email: str) -> ResolutionResult:
    """Stored profiles for ``email`` in their original merge order."""
    rows = (
        session.query(ProfileRow)
        .filter_by(email=normalize_email(email))
        .order_by(ProfileRow.rank)
        .all()
    )
    return freeze_result({row.service: row.to_record() for row in rows})


def last_resolved_at(session, email: str) -> Optional[datetime]:
    row = (
        session.query(ProfileRow)
        .filter_by(email=normalize_email(email))
        .order_by(ProfileRow.resolved_at.desc())
        .first()
    )
    return row.resolved_at if row else None
