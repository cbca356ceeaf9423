from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, String

from grocer.database import Base


class User(Base):
    """Profile keyed by the Firebase UID."""
    __tablename__ = "users"

    id = Column(String(128), primary_key=True)
    username = Column(String(200), nullable=False, default="")
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(254), nullable=False, default="")
    phone_number = Column(String(30), nullable=False)
    user_type = Column(String(20), nullable=False)  # student | non-student

    # student
    university = Column(String(200), nullable=True)
    hostel = Column(String(200), nullable=True)
    block = Column(String(50), nullable=True)
    room = Column(String(50), nullable=True)

    # non-student
    address = Column(String(500), nullable=True)
    landmark = Column(String(200), nullable=True)
    township = Column(String(100), nullable=True)
    city = Column(String(100), nullable=True)

    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
