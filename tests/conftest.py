"""Shared fixtures: an in-memory SQLite warehouse and raw report documents."""
import copy
import uuid

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.pool import StaticPool

from civic_warehouse.db.store import Warehouse
from civic_warehouse.seed.dimensions import seed_dimensions

# Two city centres one degree apart
GRID_CITIES = [
    ("Kota A", "Provinsi A", 0.0, 0.0),
    ("Kota B", "Provinsi B", 1.0, 1.0),
]

BASE_REPORT = {
    "type": "kebersihan",
    "title": "Sampah menumpuk",
    "description": "Sampah belum diangkut selama seminggu",
    "visibility": "public",
    "reporter": {
        "name": "Budi",
        "contact": {"email": "budi@example.com", "phone": "08123456789"},
    },
    "location": {
        "latitude": -6.2615,
        "longitude": 106.8106,
        "address": "Jl. Fatmawati No. 1",
    },
    "media": [],
    "status": {"current": "submitted", "updated_at": "2024-03-01T08:00:00Z"},
    "timeline": [
        {
            "status": "submitted",
            "actor": {"actor_role": "citizen"},
            "note": "Laporan dibuat",
            "timestamp": "2024-03-01T08:00:00Z",
        },
    ],
    "votes": {"upvote_count": 0, "voters": []},
    "authority": {
        "assigned_agency": "Dinas Lingkungan Hidup",
        "assigned_unit": "Unit Kebersihan",
        "assigned_officer_id": None,
    },
    "escalation": {
        "is_escalated": False,
        "escalated_to": None,
        "escalation_reason": None,
        "escalated_at": None,
    },
    "created_at": "2024-03-01T08:00:00Z",
}


def make_raw_report(**overrides) -> dict:
    """Raw report document with fresh ids; top-level keys can be overridden."""
    document = copy.deepcopy(BASE_REPORT)
    document["report_id"] = str(uuid.uuid4())
    document["reporter"]["user_id"] = str(uuid.uuid4())
    for entry in document["timeline"]:
        entry["actor"]["actor_id"] = str(uuid.uuid4())
    document.update(overrides)
    return document


def count_rows(warehouse: Warehouse, model, **filters) -> int:
    query = select(func.count()).select_from(model)
    for column, value in filters.items():
        query = query.where(getattr(model, column) == value)
    with warehouse.session() as session:
        return session.execute(query).scalar_one()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def warehouse(engine):
    """Empty warehouse with the closed dimensions and Indonesian cities seeded."""
    warehouse = Warehouse(engine)
    warehouse.create_schema()
    with warehouse.transaction() as session:
        seed_dimensions(session)
    return warehouse


@pytest.fixture
def grid_warehouse(engine):
    """Warehouse seeded with the two GRID_CITIES only."""
    warehouse = Warehouse(engine)
    warehouse.create_schema()
    with warehouse.transaction() as session:
        seed_dimensions(session, cities=GRID_CITIES)
    return warehouse


@pytest.fixture
def report_factory():
    return make_raw_report


@pytest.fixture
def count(warehouse):
    """Row counter bound to the ``warehouse`` fixture."""
    def _count(model, **filters) -> int:
        return count_rows(warehouse, model, **filters)
    return _count
