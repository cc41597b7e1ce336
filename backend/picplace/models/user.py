"""
PicPlace Backend — User SQLAlchemy Model
==========================================

What:  ORM model representing the `users` table.
Who:   Used by the repository layer and by Alembic for schema management.

Table Design Rationale:
    - UUID primary key generated in Python (portable across PostgreSQL/SQLite)
    - email: unique index; stored already normalized (lowercase)
    - password: bcrypt digest only; the plaintext never reaches this table
    - places: JSON list of owned place ids, kept equal to the set of
      places whose creator_id is this user by the paired-write operations
      in PlaceService (never written on its own)
"""

import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import JSON, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from picplace.database import Base


class User(Base):
    """
    A registered account.

    Lifecycle:
        1. Created on signup with an empty places list
        2. places list changes when one of the user's places is created/deleted
        3. Never deleted by any exposed operation
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        unique=True,
        index=True,
    )

    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt digest",
    )

    image: Mapped[str] = mapped_column(String(1024), nullable=False)

    # Reassign (never mutate in place): plain JSON columns do not track mutation
    places: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', places={len(self.places or [])})>"
