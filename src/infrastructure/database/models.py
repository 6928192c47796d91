"""SQLAlchemy ORM models for impact ledger entities."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    DateTime,
    Float,
    Index,
    Integer,
    JSON,
    String,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.domain.entities import utcnow


class Base(DeclarativeBase):
    pass


class VendorAnalysisModel(Base):
    """Cached analysis per normalized merchant, shared across users."""

    __tablename__ = "vendor_analyses"

    vendor_key: Mapped[str] = mapped_column(String(255), primary_key=True)
    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    analysis_source: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="enrichment",
    )
    unethical_practices: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    ethical_practices: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    practice_weights: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    practice_categories: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    practice_search_terms: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    information: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    citations: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    analyzed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class CreditStateModel(Base):
    """Per-user available/applied credit with an optimistic version counter."""

    __tablename__ = "credit_states"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    available_credit: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    applied_credit: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    last_applied_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    last_applied_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    last_apply_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class TransactionBatchModel(Base):
    """Append-only snapshot of a user's analyzed transactions."""

    __tablename__ = "transaction_batches"
    __table_args__ = (
        Index("ix_transaction_batches_user_created", "user_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    transactions: Mapped[list] = mapped_column(JSON, nullable=False)
    total_negative_impact: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    debt_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
