"""Aggregate figures shown to the user after a successful upload."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import pandas as pd

from participation_intake.areas import area_key, infer_area
from participation_intake.rows import StoreRecord, is_in_range


def round_one_decimal(value: float) -> float:
    """Round half up on the exact binary value, matching how the figures are displayed."""
    if not math.isfinite(value):
        return value
    return float(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def records_frame(records: list[StoreRecord] | tuple[StoreRecord, ...]) -> pd.DataFrame:
    rows = []
    for record in records:
        area = infer_area(record)
        rows.append(
            {
                "store": record.store,
                "participation": record.participation,
                "area_code": record.area_code,
                "area_key": area_key(record),
                "area": area.code,
                "area_number": area.number,
                "area_display": area.display,
            }
        )
    return pd.DataFrame(
        rows,
        columns=["store", "participation", "area_code", "area_key", "area", "area_number", "area_display"],
    )


def _area_breakdown(df: pd.DataFrame) -> list[dict[str, Any]]:
    grouped = (
        df.groupby(["area", "area_number", "area_display"], sort=False)["participation"]
        .agg(["count", "mean"])
        .reset_index()
        .sort_values(["area_number", "area"], kind="mergesort")
    )
    return [
        {
            "code": str(row["area"]),
            "number": int(row["area_number"]),
            "display": str(row["area_display"]),
            "stores": int(row["count"]),
            "average_participation": round_one_decimal(float(row["mean"])),
        }
        for _, row in grouped.iterrows()
    ]


def build_upload_summary(records: list[StoreRecord] | tuple[StoreRecord, ...]) -> dict[str, Any]:
    if not records:
        raise ValueError("cannot summarise an empty record set")

    df = records_frame(records)
    ranked = df.sort_values("participation", ascending=False, kind="mergesort")
    best = ranked.iloc[0]

    return {
        "total_stores": int(len(df)),
        "average_participation": round_one_decimal(float(df["participation"].mean())),
        "best_store": {
            "store": str(best["store"]),
            "participation": float(best["participation"]),
        },
        "areas_detected": int(df["area_key"].nunique()),
        "out_of_range_count": int((~df["participation"].map(is_in_range)).sum()),
        "areas": _area_breakdown(df),
    }


def render_summary_text(summary: dict[str, Any]) -> str:
    best = summary["best_store"]
    lines = [
        f"Successfully processed {summary['total_stores']} store records!",
        "",
        "Summary:",
        f"- Total stores: {summary['total_stores']}",
        f"- Average participation: {summary['average_participation']:.1f}%",
        f"- Best store: {best['store']} ({round_one_decimal(best['participation']):.1f}%)",
        f"- Areas detected: {summary['areas_detected']}",
    ]
    if summary.get("out_of_range_count"):
        lines.append(f"- Values outside 0-100%: {summary['out_of_range_count']}")
    return "\n".join(lines)
