"""
Database models for the component catalog.
"""
import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import String, Numeric, DateTime, Text, JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def _new_id() -> str:
    return str(uuid.uuid4())


class Component(Base):
    """
    A hardware component in the catalog.

    Fixed attributes are columns. ``specs`` is the opaque JSON slot
    (extra spec rows, legacy dynamic fields). ``type_data`` is the
    type-specific sub-record: static technical values plus the
    ``core_custom_data`` and ``data`` dynamic maps.
    """
    __tablename__ = "components"

    # Primary key
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)

    # Identity
    type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    manufacturer: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    vendor: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    model_name: Mapped[str] = mapped_column(Text, nullable=False)
    model_number: Mapped[str] = mapped_column(String(255), nullable=False)
    product_page_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Pricing
    price: Mapped[Optional[float]] = mapped_column(Numeric(12, 2), nullable=True)
    discounted_price: Mapped[Optional[float]] = mapped_column(Numeric(12, 2), nullable=True)
    tracked_price: Mapped[Optional[float]] = mapped_column(Numeric(12, 2), nullable=True)

    # JSON payloads
    specs: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    type_data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<Component(id={self.id}, type={self.type}, model={self.model_name})>"
