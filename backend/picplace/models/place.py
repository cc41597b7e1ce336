"""
PicPlace Backend — Place SQLAlchemy Model
===========================================

What:  ORM model representing the `places` table.

Table Design Rationale:
    - lat/lng are derived from the address by the geocoder; clients never send them
    - creator_id references users.id; indexed for "places of a user" lookups
    - image holds the public path of an uploaded image (uploads/images/<name>)
    - address, location and creator are fixed after creation; only title
      and description are updatable
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Float, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from picplace.database import Base


class Place(Base):
    """A geocoded point of interest owned by one user."""

    __tablename__ = "places"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[str] = mapped_column(String(1024), nullable=False)

    lat: Mapped[float] = mapped_column(Float, nullable=False)
    lng: Mapped[float] = mapped_column(Float, nullable=False)

    image: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True, default=None)

    creator_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<Place(id={self.id}, title='{self.title}', creator_id={self.creator_id})>"
