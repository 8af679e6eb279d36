# models.py
"""
Defines the SQLAlchemy ORM models, representing the tables in the database.
"""
from sqlalchemy import (
    JSON, Boolean, CheckConstraint, Column, DateTime, Float, ForeignKey,
    Integer, String, Text, UniqueConstraint,
)
from database import Base
import datetime
import uuid


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Property(Base):
    """A listing that users can browse, favorite and get an estimate for."""
    __tablename__ = "properties"
    __table_args__ = (
        CheckConstraint(
            "property_type IN ('apartment', 'house', 'villa', 'penthouse', 'studio')",
            name="ck_properties_property_type",
        ),
        CheckConstraint("status IN ('available', 'sold', 'pending')", name="ck_properties_status"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    property_type = Column(String, nullable=False)
    price = Column(Float, nullable=False, index=True)
    area_sqft = Column(Integer, nullable=False)
    bedrooms = Column(Integer, nullable=False, index=True)
    bathrooms = Column(Float, nullable=False)
    address = Column(String, nullable=False)
    city = Column(String, nullable=False, index=True)
    state = Column(String, nullable=False)
    zipcode = Column(String, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    images = Column(JSON, default=list)
    amenities = Column(JSON, default=list)
    status = Column(String, default="available", nullable=False)
    agent_name = Column(String, nullable=True)
    agent_contact = Column(String, nullable=True)
    year_built = Column(Integer, nullable=True)
    parking_spaces = Column(Integer, default=0)
    furnished = Column(Boolean, default=False)
    pet_friendly = Column(Boolean, default=False)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)


class UserFavorite(Base):
    """Join table between a user and the listings they saved."""
    __tablename__ = "user_favorites"
    __table_args__ = (UniqueConstraint("user_id", "property_id", name="uq_user_favorites_user_property"),)

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String, nullable=False, index=True)
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=_utcnow)


class PropertyView(Base):
    __tablename__ = "property_views"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String, nullable=True, index=True)
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    session_id = Column(String, nullable=True)
    viewed_at = Column(DateTime, default=_utcnow)
