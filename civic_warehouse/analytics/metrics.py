"""Metric calculations over warehouse query results.

Pure functions: frames and rows in, JSON-ready dicts out. Rounding is
half-up (0.5 rounds towards +inf) so dashboard numbers stay stable across
backends.
"""

import math

import pandas as pd

UNASSIGNED_AGENCY = "Belum Ditugaskan"

STATUS_NAMES = ("submitted", "verified", "in_progress", "resolved", "rejected", "escalated")

TYPE_MAPPING = {
    "kriminalitas": "Keamanan",
    "kebersihan": "Kebersihan",
    "kesehatan": "Pelayanan Publik",
    "fasilitas": "Infrastruktur",
    "lainnya": "Lainnya",
}
DEFAULT_CATEGORY = "Lainnya"

# ~1.1 km cells
GRID_SIZE = 0.01

MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "Mei", "Jun", "Jul", "Agu", "Sep", "Okt", "Nov", "Des")


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _optional_float(value) -> float | None:
    return None if pd.isna(value) else float(value)


def resolution_hours(lifecycle: pd.DataFrame) -> pd.Series:
    """Hours from creation to first resolution, for currently resolved reports.

    Other reports get NaN. Negative spans (resolution stamped before
    creation) are clipped to 0.
    """
    created = pd.to_datetime(lifecycle["created_at"], utc=True)
    resolved = pd.to_datetime(lifecycle["resolved_at"], utc=True)
    hours = ((resolved - created).dt.total_seconds() / 3600).clip(lower=0)
    return hours.where(lifecycle["current_status"] == "resolved")


def _agency_stats(lifecycle: pd.DataFrame, sla_hours: float) -> list[dict]:
    """Per-agency totals, busiest agency first. Unassigned reports are skipped."""
    assigned = lifecycle[lifecycle["agency"].notna() & (lifecycle["agency"] != UNASSIGNED_AGENCY)].copy()
    assigned["resolution_hours"] = resolution_hours(assigned)
    assigned["is_resolved"] = assigned["current_status"] == "resolved"
    assigned["sla_breached"] = assigned["resolution_hours"] > sla_hours

    grouped = assigned.groupby("agency", sort=False).agg(
        total_reports=("report_id", "count"),
        resolved_count=("is_resolved", "sum"),
        avg_resolution_hours=("resolution_hours", "mean"),
        sla_breached_count=("sla_breached", "sum"),
    )
    grouped = grouped.sort_values("total_reports", ascending=False, kind="stable")

    return [
        {
            "agency": agency,
            "total_reports": int(row["total_reports"]),
            "resolved_count": int(row["resolved_count"]),
            "avg_resolution_hours": _optional_float(row["avg_resolution_hours"]),
            "sla_breached_count": int(row["sla_breached_count"]),
        }
        for agency, row in grouped.iterrows()
    ]


def calculate_ranking(lifecycle: pd.DataFrame, sla_hours: float = 72.0) -> list[dict]:
    """Score agencies 0-100 on SLA breaches and resolution speed.

    score = max(0, round(100 - breach_rate * 0.3 - min(avg_hours / sla * 20, 30)))
    where breach_rate is the percentage of the agency's reports that breached.
    Equal scores keep the busiest-first order.
    """
    ranking = []
    for stats in _agency_stats(lifecycle, sla_hours):
        avg_hours = stats["avg_resolution_hours"]
        total = stats["total_reports"]
        breach_rate = stats["sla_breached_count"] / total * 100 if total > 0 else 0
        resolution_penalty = min((avg_hours or 0) / sla_hours * 20, 30)
        score = max(0, int(round_half_up(100 - breach_rate * 0.3 - resolution_penalty)))

        ranking.append({
            "rank": 0,
            "agency_name": stats["agency"],
            "total_reports": total,
            "resolved_count": stats["resolved_count"],
            "sla_breached_count": stats["sla_breached_count"],
            "avg_resolution_time_hours": round_half_up(avg_hours, 1) if avg_hours is not None else None,
            "score": score,
        })

    ranking.sort(key=lambda item: item["score"], reverse=True)
    for position, item in enumerate(ranking, start=1):
        item["rank"] = position
    return ranking


def calculate_sla_compliance(lifecycle: pd.DataFrame, sla_hours: float = 72.0) -> list[dict]:
    compliance = []
    for stats in _agency_stats(lifecycle, sla_hours):
        total = stats["total_reports"]
        if total == 0:
            continue
        breached = stats["sla_breached_count"]
        compliance.append({
            "agency_name": stats["agency"],
            "total_assigned": total,
            "resolved_count": stats["resolved_count"],
            "sla_breached_count": breached,
            "compliance_rate": round_half_up((total - breached) / total * 100, 2),
        })

    compliance.sort(key=lambda item: item["compliance_rate"], reverse=True)
    return compliance


def calculate_mttr_by_type(lifecycle: pd.DataFrame) -> list[dict]:
    """Mean time to resolution per report type; types with nothing resolved go last."""
    frame = lifecycle.copy()
    frame["resolution_hours"] = resolution_hours(frame)
    frame["is_resolved"] = frame["current_status"] == "resolved"

    grouped = frame.groupby("report_type", sort=False).agg(
        total_reports=("report_id", "count"),
        resolved_count=("is_resolved", "sum"),
        avg_resolution_hours=("resolution_hours", "mean"),
    )

    mttr = []
    for report_type, row in grouped.iterrows():
        avg_hours = _optional_float(row["avg_resolution_hours"])
        mttr.append({
            "report_type": report_type,
            "avg_resolution_hours": round_half_up(avg_hours, 1) if avg_hours is not None else None,
            "resolved_count": int(row["resolved_count"]),
            "total_reports": int(row["total_reports"]),
        })

    mttr.sort(key=lambda item: (item["avg_resolution_hours"] is None, item["avg_resolution_hours"] or 0))
    return mttr


def calculate_type_distribution(status_counts: list[tuple[str, str, int]]) -> list[dict]:
    """Fold (report_type, status, count) triples into one breakdown per type."""
    by_type: dict[str, dict] = {}
    for report_type, status, count in status_counts:
        entry = by_type.setdefault(report_type, {
            "report_type": report_type,
            "status_counts": {name: 0 for name in STATUS_NAMES},
            "total": 0,
        })
        entry["status_counts"][status] = entry["status_counts"].get(status, 0) + count
        entry["total"] += count

    return sorted(by_type.values(), key=lambda entry: entry["total"], reverse=True)


def _grid_cell(coordinate: float) -> int:
    return math.floor(coordinate / GRID_SIZE + 0.5)


def calculate_heatmap(frame: pd.DataFrame) -> dict:
    """Map points for located reports plus grid clusters of two or more reports."""
    located = frame[frame["latitude"].notna() & frame["longitude"].notna()]

    points = []
    clusters: dict[tuple[int, int], dict] = {}
    for row in located.itertuples(index=False):
        latitude = float(row.latitude)
        longitude = float(row.longitude)
        category = TYPE_MAPPING.get(row.report_type, DEFAULT_CATEGORY)

        points.append({
            "id": str(row.report_id),
            "latitude": latitude,
            "longitude": longitude,
            "type": category,
            "intensity": min(int(row.upvote_count) / 10, 1.0),
        })

        cell = (_grid_cell(latitude), _grid_cell(longitude))
        cluster = clusters.setdefault(cell, {
            "latitude": round(cell[0] * GRID_SIZE, 4),
            "longitude": round(cell[1] * GRID_SIZE, 4),
            "count": 0,
            "types": {},
        })
        cluster["count"] += 1
        cluster["types"][category] = cluster["types"].get(category, 0) + 1

    return {
        "points": points,
        "clusters": [cluster for cluster in clusters.values() if cluster["count"] > 1],
    }


def _rate(count: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round_half_up(count / total * 1000) / 10


def calculate_escalation(lifecycle: pd.DataFrame, query_months: int = 12, trend_months: int = 8) -> dict:
    """Escalation and rejection totals plus a chronological monthly trend.

    Totals cover the whole window. The trend keeps the most recent
    `trend_months` of the latest `query_months` months that have reports.
    """
    total = len(lifecycle)
    is_escalated = lifecycle["is_escalated"].astype(bool)
    is_rejected = lifecycle["current_status"] == "rejected"
    is_resolved = lifecycle["current_status"] == "resolved"

    escalated = int(is_escalated.sum())
    rejected = int(is_rejected.sum())
    stats = {
        "total_reports": total,
        "total_escalated": escalated,
        "total_rejected": rejected,
        "escalation_rate": _rate(escalated, total),
        "rejection_rate": _rate(rejected, total),
    }

    trends = []
    if total:
        created = pd.to_datetime(lifecycle["created_at"], utc=True)
        monthly = pd.DataFrame({
            "year": created.dt.year,
            "month": created.dt.month,
            "total": 1,
            "escalated": is_escalated.astype(int),
            "rejected": is_rejected.astype(int),
            "resolved": is_resolved.astype(int),
        }).groupby(["year", "month"]).sum()
        recent = monthly.sort_index(ascending=False).head(query_months).head(trend_months)

        for (year, month), row in recent.iloc[::-1].iterrows():
            trends.append({
                "period": MONTH_LABELS[int(month) - 1],
                "year": int(year),
                "month": int(month),
                "total": int(row["total"]),
                "escalated": int(row["escalated"]),
                "rejected": int(row["rejected"]),
                "resolved": int(row["resolved"]),
            })

    return {"stats": stats, "trends": trends}
