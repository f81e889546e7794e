"""User account model."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, func
from sqlmodel import Field, SQLModel

from ._time import utcnow


class User(SQLModel, table=True):
    """Account mirrored from the external identity provider."""

    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid4()), sa_column=Column(String(36), primary_key=True))
    # Subject id issued by the identity provider; never rewritten once stored.
    external_subject_id: str = Field(
        sa_column=Column(String(255), unique=True, nullable=False, index=True)
    )
    display_name: str = Field(
        sa_column=Column(String(80), nullable=False, index=True)
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        ),
    )
