"""Validation models for raw report documents from the report service.

Only the fields the warehouse needs are declared; unknown keys are ignored.
All timestamps are normalised to UTC.
"""

import uuid
from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, Field, ValidationError

from civic_warehouse.errors import ReportParseError


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_to_utc)]


class RawContact(BaseModel):
    email: str | None = None
    phone: str | None = None


class RawReporter(BaseModel):
    user_id: uuid.UUID
    name: str
    contact: RawContact = Field(default_factory=RawContact)


class RawLocation(BaseModel):
    latitude: float | None = None
    longitude: float | None = None
    address: str | None = None
    city: str | None = None


class RawMedia(BaseModel):
    media_id: uuid.UUID
    type: str
    url: str | None = None
    uploaded_at: UtcDatetime


class RawStatus(BaseModel):
    current: str
    updated_at: UtcDatetime | None = None


class RawActor(BaseModel):
    actor_id: uuid.UUID | None = None
    actor_role: str


class RawTimelineEntry(BaseModel):
    status: str
    actor: RawActor
    note: str | None = None
    timestamp: UtcDatetime


class RawVotes(BaseModel):
    upvote_count: int = 0
    voters: list[uuid.UUID] = Field(default_factory=list)


class RawAuthority(BaseModel):
    assigned_agency: str | None = None
    assigned_unit: str | None = None
    assigned_officer_id: uuid.UUID | None = None


class RawEscalation(BaseModel):
    is_escalated: bool = False
    escalated_to: str | None = None
    escalation_reason: str | None = None
    escalated_at: UtcDatetime | None = None


class RawReport(BaseModel):
    report_id: uuid.UUID
    type: str
    title: str | None = None
    description: str | None = None
    visibility: str
    reporter: RawReporter
    location: RawLocation = Field(default_factory=RawLocation)
    media: list[RawMedia] = Field(default_factory=list)
    status: RawStatus
    timeline: list[RawTimelineEntry] = Field(default_factory=list)
    votes: RawVotes = Field(default_factory=RawVotes)
    authority: RawAuthority = Field(default_factory=RawAuthority)
    escalation: RawEscalation = Field(default_factory=RawEscalation)
    created_at: UtcDatetime


def parse_raw_report(document: Any) -> RawReport:
    """Validate one raw document; raises ReportParseError on a bad shape."""
    if isinstance(document, RawReport):
        return document
    report_id = document.get("report_id") if isinstance(document, dict) else None
    try:
        return RawReport.model_validate(document)
    except ValidationError as e:
        raise ReportParseError(
            str(report_id) if report_id is not None else None,
            f"Invalid report document: {e.error_count()} error(s): {e.errors()[0]['msg']}",
        ) from e
