"""CLI entry-point for seeding the static warehouse dimensions.

Usage:
    python -m civic_warehouse.seed.dimensions
    python -m civic_warehouse.seed.dimensions --create-schema
"""

import argparse
import sys

from sqlalchemy.orm import Session

from civic_warehouse.db.store import insert_ignore
from civic_warehouse.models.warehouse import (
    DimActorRole,
    DimCity,
    DimReportType,
    DimStatus,
    DimVisibility,
)

REPORT_TYPES = ["kriminalitas", "kebersihan", "kesehatan", "fasilitas", "lainnya"]
VISIBILITIES = ["public", "private", "anonymous"]
STATUSES = ["submitted", "verified", "in_progress", "resolved", "rejected", "escalated"]
ACTOR_ROLES = ["citizen", "officer", "supervisor", "system"]

# (name, province, center_lat, center_lng)
INDONESIAN_CITIES = [
    # Java
    ("Jakarta Pusat", "DKI Jakarta", -6.1751, 106.865),
    ("Jakarta Selatan", "DKI Jakarta", -6.2615, 106.8106),
    ("Jakarta Timur", "DKI Jakarta", -6.225, 106.9004),
    ("Jakarta Barat", "DKI Jakarta", -6.1484, 106.7558),
    ("Jakarta Utara", "DKI Jakarta", -6.1214, 106.9229),
    ("Surabaya", "Jawa Timur", -7.2575, 112.7521),
    ("Bandung", "Jawa Barat", -6.9175, 107.6191),
    ("Semarang", "Jawa Tengah", -6.9666, 110.4196),
    ("Yogyakarta", "DI Yogyakarta", -7.7956, 110.3695),
    ("Bekasi", "Jawa Barat", -6.2383, 106.9756),
    ("Tangerang", "Banten", -6.1783, 106.63),
    ("Depok", "Jawa Barat", -6.4025, 106.7942),
    ("Malang", "Jawa Timur", -7.9778, 112.6349),
    ("Bogor", "Jawa Barat", -6.5971, 106.806),
    # Sumatra
    ("Medan", "Sumatera Utara", 3.5952, 98.6722),
    ("Palembang", "Sumatera Selatan", -2.9761, 104.7754),
    ("Pekanbaru", "Riau", 0.5071, 101.4478),
    ("Batam", "Kepulauan Riau", 1.0456, 104.0305),
    ("Padang", "Sumatera Barat", -0.9471, 100.4172),
    ("Bandar Lampung", "Lampung", -5.3971, 105.2668),
    # Kalimantan
    ("Balikpapan", "Kalimantan Timur", -1.2379, 116.8529),
    ("Banjarmasin", "Kalimantan Selatan", -3.3194, 114.59),
    ("Pontianak", "Kalimantan Barat", -0.0263, 109.3425),
    ("Samarinda", "Kalimantan Timur", -0.4948, 117.1436),
    # Sulawesi
    ("Makassar", "Sulawesi Selatan", -5.1477, 119.4327),
    ("Manado", "Sulawesi Utara", 1.4748, 124.8421),
    ("Palu", "Sulawesi Tengah", -0.8917, 119.8707),
    # Bali & Nusa Tenggara
    ("Denpasar", "Bali", -8.6705, 115.2126),
    ("Mataram", "Nusa Tenggara Barat", -8.5833, 116.1167),
    ("Kupang", "Nusa Tenggara Timur", -10.1772, 123.607),
    # Papua & Maluku
    ("Jayapura", "Papua", -2.5337, 140.7181),
    ("Ambon", "Maluku", -3.6954, 128.1814),
]


def _seed_names(session: Session, model, names: list[str]) -> int:
    return sum(insert_ignore(session, model, {"name": name}) for name in names)


def seed_dimensions(session: Session, cities=INDONESIAN_CITIES) -> dict[str, int]:
    """Insert the closed enumerated sets and city centres. Safe to re-run."""
    counts = {
        "report_types": _seed_names(session, DimReportType, REPORT_TYPES),
        "visibilities": _seed_names(session, DimVisibility, VISIBILITIES),
        "statuses": _seed_names(session, DimStatus, STATUSES),
        "actor_roles": _seed_names(session, DimActorRole, ACTOR_ROLES),
    }
    counts["cities"] = sum(
        insert_ignore(
            session,
            DimCity,
            {"name": name, "province": province, "center_lat": lat, "center_lng": lng},
        )
        for name, province, lat, lng in cities
    )
    return counts


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed static warehouse dimensions")
    parser.add_argument(
        "--create-schema", action="store_true", help="Create missing tables first"
    )
    args = parser.parse_args()

    from civic_warehouse.db.warehouse_engine import get_warehouse

    warehouse = get_warehouse()
    if args.create_schema:
        warehouse.create_schema()

    print("Seeding dimension tables...")
    try:
        with warehouse.transaction() as session:
            counts = seed_dimensions(session)
    except Exception as e:
        print(f"Error seeding dimension tables: {e}")
        sys.exit(1)

    for table, inserted in counts.items():
        print(f"  {table}: {inserted} inserted")
    print("Dimension tables seeded successfully.")


if __name__ == "__main__":
    main()
