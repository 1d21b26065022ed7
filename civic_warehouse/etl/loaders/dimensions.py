"""Surrogate-key resolution for warehouse dimensions."""

import logging
import math
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from civic_warehouse.config import AuthorityConflictPolicy
from civic_warehouse.db.store import insert_ignore
from civic_warehouse.errors import DimensionConflict, MissingDimensionValue
from civic_warehouse.models.warehouse import (
    DimActorRole,
    DimAuthority,
    DimCity,
    DimReportType,
    DimStatus,
    DimVisibility,
)

logger = logging.getLogger(__name__)

KM_PER_DEGREE = 111.0

# Closed, pre-seeded dimensions: model -> surrogate key column name
ENUM_DIMENSIONS = {
    DimReportType: "report_type_id",
    DimVisibility: "visibility_id",
    DimStatus: "status_id",
    DimActorRole: "actor_role_id",
}


def approx_distance_km(lat: float, lng: float, center_lat: float, center_lng: float) -> float:
    """Planar distance with the longitude degree scaled by cos(latitude)."""
    d_lat = (lat - center_lat) * KM_PER_DEGREE
    d_lng = (lng - center_lng) * KM_PER_DEGREE * math.cos(math.radians(lat))
    return math.sqrt(d_lat**2 + d_lng**2)


def nearest_city(lat: float, lng: float, cities: list[tuple[int, float, float]]) -> int | None:
    """Pick the city id with the smallest distance; None if there are no cities.

    Ties keep the first city in the given order.
    """
    best_id = None
    best_distance = math.inf
    for city_id, center_lat, center_lng in cities:
        distance = approx_distance_km(lat, lng, center_lat, center_lng)
        if distance < best_distance:
            best_id, best_distance = city_id, distance
    return best_id


class DimensionResolver:
    """Resolves dimension names to surrogate keys inside one session.

    Lookups are cached per resolver, which lives for a single ingestion
    transaction.
    """

    def __init__(self, session: Session):
        self.session = session
        self._enum_cache: dict[tuple[str, str], int] = {}
        self._cities: list[tuple[int, float, float]] | None = None

    def resolve_enum(self, model, name: str) -> int:
        """Exact-match lookup on a closed dimension.

        Raises:
            MissingDimensionValue: no row matches; the value is never created.
        """
        table = model.__tablename__
        cache_key = (table, name)
        if cache_key in self._enum_cache:
            return self._enum_cache[cache_key]

        key_column = getattr(model, ENUM_DIMENSIONS[model])
        key = self.session.execute(
            select(key_column).where(model.name == name).limit(1)
        ).scalar_one_or_none()
        if key is None:
            raise MissingDimensionValue(table, name)

        self._enum_cache[cache_key] = key
        return key

    def report_type_id(self, name: str) -> int:
        return self.resolve_enum(DimReportType, name)

    def visibility_id(self, name: str) -> int:
        return self.resolve_enum(DimVisibility, name)

    def status_id(self, name: str) -> int:
        return self.resolve_enum(DimStatus, name)

    def actor_role_id(self, name: str) -> int:
        return self.resolve_enum(DimActorRole, name)

    def city_by_name(self, name: str) -> int | None:
        return self.session.execute(
            select(DimCity.city_id).where(DimCity.name == name).limit(1)
        ).scalar_one_or_none()

    def nearest_city(self, lat: float, lng: float) -> int | None:
        if self._cities is None:
            rows = self.session.execute(
                select(DimCity.city_id, DimCity.center_lat, DimCity.center_lng)
                .order_by(DimCity.city_id)
            ).all()
            self._cities = [tuple(row) for row in rows]
        return nearest_city(lat, lng, self._cities)

    def resolve_city(
        self, name: str | None, lat: float | None, lng: float | None
    ) -> int | None:
        """Exact name first, then nearest centre by coordinates, else unresolved."""
        if name:
            city_id = self.city_by_name(name)
            if city_id is not None:
                return city_id
        if lat is not None and lng is not None:
            return self.nearest_city(lat, lng)
        return None

    def _authority_id(self, agency: str) -> int | None:
        return self.session.execute(
            select(DimAuthority.authority_id).where(DimAuthority.agency == agency)
        ).scalar_one_or_none()

    def resolve_authority(
        self,
        agency: str | None,
        unit: str | None,
        officer_id,
        policy: AuthorityConflictPolicy = "lookup-existing",
    ) -> int | None:
        """Resolve or create the authority row for an assigned agency.

        An existing row for the agency is always reused. The policy only
        applies when no row was found but the insert still conflicted,
        i.e. another writer created the agency in between:
            lookup-existing: reuse the row the other writer created.
            skip-link: leave the report unlinked (returns None) and log.
            fail: raise DimensionConflict, aborting the transaction.
        """
        if not agency:
            return None

        existing = self._authority_id(agency)
        if existing is not None:
            return existing

        inserted = insert_ignore(
            self.session,
            DimAuthority,
            {
                "agency": agency,
                "unit": unit,
                "officer_id": officer_id,
                "loaded_at": datetime.now(timezone.utc),
            },
        )
        if inserted:
            return self._authority_id(agency)

        # Lost a creation race between the select and the insert
        if policy == "fail":
            raise DimensionConflict(agency)
        if policy == "skip-link":
            logger.warning(
                f"Authority for agency {agency!r} was created concurrently; report left unlinked"
            )
            return None
        return self._authority_id(agency)
