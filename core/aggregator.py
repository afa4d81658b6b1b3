import logging
import math
from typing import Iterable, List
import pandas as pd
from core.models import ClinicalLogEntry, HoursBreakdown, SiteHours

logger = logging.getLogger(__name__)

LOG_COLUMNS = ["id", "site_name", "hours", "is_simulation", "is_makeup"]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (62.5 -> 63)."""
    return int(math.floor(value + 0.5))


def sim_percentage(sim_hours: float, total_hours: float) -> int:
    """Simulation share of total hours as a whole percentage, 0 when nothing is logged."""
    if total_hours <= 0:
        return 0
    return round_half_up(sim_hours / total_hours * 100)


def entries_to_frame(entries: Iterable[ClinicalLogEntry]) -> pd.DataFrame:
    """
    Build a DataFrame of the columns the aggregator needs, one row per entry.

    Rows are sorted by entry id so the frame is the same for any input order.
    """
    rows = [
        {
            "id": str(e.id),
            "site_name": e.site_name,
            "hours": float(e.hours),
            "is_simulation": bool(e.is_simulation),
            "is_makeup": bool(e.is_makeup),
        }
        for e in entries
    ]
    df = pd.DataFrame(rows, columns=LOG_COLUMNS)
    return df.sort_values(by="id", kind="mergesort").reset_index(drop=True)


def aggregate_hours(entries: Iterable[ClinicalLogEntry]) -> HoursBreakdown:
    """
    Fold one student's clinical-log entries into hour totals.

    Totals are split into direct (non-simulation) and simulation hours; makeup
    hours are counted independently of that split, so a simulation makeup
    entry adds to both `sim_hours` and `makeup_hours`. A per-site breakdown is
    returned sorted by site name.

    Entries with non-positive or non-finite hours are not accumulated; their ids are
    returned in `skipped_entry_ids`.

    The result is identical for any permutation of `entries`: sums use exact
    floating-point summation, which does not depend on addition order.
    """
    df = entries_to_frame(entries)

    invalid = ~df["hours"].between(0, math.inf, inclusive="neither")
    skipped: List[str] = sorted(df.loc[invalid, "id"].tolist())
    if skipped:
        logger.warning("Skipping %d log entries with non-positive or non-finite hours: %s", len(skipped), skipped)
    df = df.loc[~invalid]

    if df.empty:
        return HoursBreakdown(skipped_entry_ids=skipped)

    df = df.assign(
        direct=df["hours"].where(~df["is_simulation"], 0.0),
        sim=df["hours"].where(df["is_simulation"], 0.0),
        makeup=df["hours"].where(df["is_makeup"], 0.0),
    )

    by_site = df.groupby("site_name", sort=True).agg(
        total_hours=("hours", math.fsum),
        direct_hours=("direct", math.fsum),
        sim_hours=("sim", math.fsum),
        is_makeup=("is_makeup", "any"),
    )
    hours_by_site = [
        SiteHours(
            site_name=str(site),
            total_hours=float(row.total_hours),
            direct_hours=float(row.direct_hours),
            sim_hours=float(row.sim_hours),
            is_makeup=bool(row.is_makeup),
        )
        for site, row in by_site.iterrows()
    ]

    total = math.fsum(df["hours"])
    sim = math.fsum(df["sim"])

    return HoursBreakdown(
        total_hours=total,
        direct_hours=math.fsum(df["direct"]),
        sim_hours=sim,
        makeup_hours=math.fsum(df["makeup"]),
        sim_percentage=sim_percentage(sim, total),
        hours_by_site=hours_by_site,
        skipped_entry_ids=skipped,
    )
