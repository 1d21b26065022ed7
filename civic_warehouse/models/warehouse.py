"""SQLAlchemy ORM models for the civic-complaint star schema.

Tables are declared without a schema; the production engine places them in
the configured Postgres schema through ``schema_translate_map``. Written only
by the ingestion engine and read by the analytics layer.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Double,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# SQLite only auto-increments INTEGER PRIMARY KEY columns.
EventKey = BigInteger().with_variant(Integer, "sqlite")


class WarehouseBase(DeclarativeBase):
    pass


# ===================================================================
# DIMENSION TABLES
# ===================================================================


class DimReportType(WarehouseBase):
    __tablename__ = "dim_report_type"

    report_type_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)


class DimVisibility(WarehouseBase):
    __tablename__ = "dim_visibility"

    visibility_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)


class DimStatus(WarehouseBase):
    """Canonical lifecycle statuses."""
    __tablename__ = "dim_status"

    status_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)


class DimActorRole(WarehouseBase):
    __tablename__ = "dim_actor_role"

    actor_role_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)


class DimReporter(WarehouseBase):
    """Sanitized reporter identity (contact details are never stored)."""
    __tablename__ = "dim_reporter"

    reporter_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    loaded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class DimAuthority(WarehouseBase):
    """Agency/unit responsible for handling a report."""
    __tablename__ = "dim_authority"

    authority_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    agency: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    unit: Mapped[str | None] = mapped_column(String(255), nullable=True)
    officer_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    loaded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class DimCity(WarehouseBase):
    __tablename__ = "dim_city"

    city_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    province: Mapped[str] = mapped_column(String(255), nullable=False)
    center_lat: Mapped[float] = mapped_column(Double, nullable=False)
    center_lng: Mapped[float] = mapped_column(Double, nullable=False)


# ===================================================================
# FACT TABLES
# ===================================================================


class FactReport(WarehouseBase):
    """Grain: 1 row = 1 report."""
    __tablename__ = "fact_reports"

    report_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    report_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dim_report_type.report_type_id"), nullable=False
    )
    visibility_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dim_visibility.visibility_id"), nullable=False
    )
    current_status_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dim_status.status_id"), nullable=False
    )
    authority_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("dim_authority.authority_id"), nullable=True
    )
    city_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("dim_city.city_id"), nullable=True
    )
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    latitude: Mapped[float | None] = mapped_column(Double, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Double, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    upvote_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_escalated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    loaded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class BridgeReportReporter(WarehouseBase):
    """Report <-> reporter bridge; allows several reporters per report."""
    __tablename__ = "bridge_report_reporter"

    report_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("fact_reports.report_id"), primary_key=True
    )
    reporter_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("dim_reporter.reporter_id"), primary_key=True
    )


class FactStatusEvent(WarehouseBase):
    """Grain: 1 row = 1 status transition."""
    __tablename__ = "fact_status_events"

    status_event_id: Mapped[int] = mapped_column(EventKey, primary_key=True, autoincrement=True)
    report_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("fact_reports.report_id"), nullable=False, index=True
    )
    status_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dim_status.status_id"), nullable=False
    )
    actor_role_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dim_actor_role.actor_role_id"), nullable=False
    )
    actor_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # NULL in append mode; NULLs never collide on the unique index
    event_key: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    loaded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class FactMediaEvent(WarehouseBase):
    """Grain: 1 row = 1 uploaded media item."""
    __tablename__ = "fact_media_events"

    media_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    report_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("fact_reports.report_id"), nullable=False, index=True
    )
    media_type: Mapped[str] = mapped_column(String(50), nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class FactVoteEvent(WarehouseBase):
    """Grain: 1 row = 1 upvote by 1 voter on 1 report."""
    __tablename__ = "fact_vote_events"

    report_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("fact_reports.report_id"), primary_key=True
    )
    voter_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    voted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class FactEscalationEvent(WarehouseBase):
    """Grain: 1 row = 1 escalation action."""
    __tablename__ = "fact_escalation_events"

    escalation_event_id: Mapped[int] = mapped_column(EventKey, primary_key=True, autoincrement=True)
    report_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("fact_reports.report_id"), nullable=False, index=True
    )
    escalated_to: Mapped[str | None] = mapped_column(Text, nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    escalated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    event_key: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    loaded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ===================================================================
# ETL TRACKING
# ===================================================================


class EtlBatchRun(WarehouseBase):
    __tablename__ = "etl_batch_run"

    batch_run_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="in_progress")
    processed_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failed_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
