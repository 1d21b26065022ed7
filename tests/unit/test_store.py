"""Unit tests for the storage abstraction and dimension seeding."""
import pytest

from civic_warehouse.db.store import insert_ignore
from civic_warehouse.errors import MissingDimensionValue
from civic_warehouse.models.warehouse import DimCity, DimReportType, DimStatus
from civic_warehouse.seed.dimensions import INDONESIAN_CITIES, STATUSES, seed_dimensions


class TestInsertIgnore:
    """Tests for conflict-tolerant inserts."""

    def test_returns_one_for_new_row(self, warehouse):
        with warehouse.transaction() as session:
            assert insert_ignore(session, DimReportType, {"name": "banjir"}) == 1

    def test_returns_zero_on_conflict(self, warehouse, count):
        with warehouse.transaction() as session:
            assert insert_ignore(session, DimReportType, {"name": "kebersihan"}) == 0
        assert count(DimReportType, name="kebersihan") == 1


class TestTransaction:
    """Tests for the transaction boundary."""

    def test_domain_error_rolls_back_and_propagates(self, warehouse, count):
        with pytest.raises(MissingDimensionValue):
            with warehouse.transaction() as session:
                insert_ignore(session, DimReportType, {"name": "banjir"})
                raise MissingDimensionValue("dim_report_type", "banjir")
        assert count(DimReportType, name="banjir") == 0


class TestSeedDimensions:
    """Tests for seed_dimensions."""

    def test_seeds_closed_sets_and_cities(self, warehouse, count):
        assert count(DimStatus) == len(STATUSES)
        assert count(DimCity) == len(INDONESIAN_CITIES) == 32

    def test_reseeding_inserts_nothing(self, warehouse, count):
        with warehouse.transaction() as session:
            inserted = seed_dimensions(session)
        assert set(inserted.values()) == {0}
        assert count(DimReportType) == 5
