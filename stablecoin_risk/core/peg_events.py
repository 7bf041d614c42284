"""
Peg-Event Extractor.

Reduces a daily price series into a handful of noteworthy peg events:

1. Keep "significant" samples: deviation above 0.2%, the first/last three
   samples, or the local high/low of a centred 7-sample window.
2. Keep one sample per (year, day-of-month // 7) bucket, the one furthest
   from peg.
3. Sort by date and label each event by deviation magnitude.

Note: the bucket is day-of-month // 7, not an ISO week, so buckets restart
at every month boundary.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from ..thresholds import (
    PEG_AT_PEG_BELOW_PCT,
    PEG_AT_PEG_DESCRIPTION,
    PEG_DEFAULT_DESCRIPTION,
    PEG_EVENT_FILTER,
    PEG_EVENT_LADDER,
    PEG_SCORING,
)
from .models import PegEvent, PriceSample

IDEAL_PEG = 1.0


@dataclass(frozen=True)
class PegStatistics:
    max_deviation_pct: float
    avg_deviation_pct: float
    depeg_count: int
    worst_event: Optional[PegEvent]


def deviation_pct(price: float, peg: float = IDEAL_PEG) -> float:
    """Absolute deviation from peg, in percent."""
    return abs((price - peg) / peg) * 100


def describe_deviation(dev_pct: float) -> str:
    """Label a deviation (in percent) using the event ladder."""
    for rung in PEG_EVENT_LADDER:
        if dev_pct >= rung["min_deviation_pct"]:
            return rung["description"]
    if dev_pct < PEG_AT_PEG_BELOW_PCT:
        return PEG_AT_PEG_DESCRIPTION
    return PEG_DEFAULT_DESCRIPTION


def significant_mask(prices: np.ndarray, peg: float = IDEAL_PEG, config: dict = PEG_EVENT_FILTER) -> np.ndarray:
    """Boolean mask of samples worth keeping before weekly dedup."""
    n = len(prices)
    if n == 0:
        return np.zeros(0, dtype=bool)

    deviations = np.abs((prices - peg) / peg)
    mask = deviations > config["significant_deviation"]

    edge = config["edge_samples"]
    mask[:edge] = True
    mask[max(0, n - edge):] = True

    half = config["window_half_width"]
    for i in range(n):
        if mask[i]:
            continue
        window = prices[max(0, i - half):min(n, i + half + 1)]
        if prices[i] == window.max() or prices[i] == window.min():
            mask[i] = True

    return mask


def extract_peg_events(
    samples: Sequence[PriceSample],
    peg: float = IDEAL_PEG,
    config: dict = PEG_EVENT_FILTER,
) -> List[PegEvent]:
    """
    Convert an ascending daily price series into de-noised peg events.

    Args:
        samples: Daily PriceSample sequence, ascending by date
        peg: Target price
        config: Filter parameters (significance, edges, window, bucket size)

    Returns:
        PegEvent list sorted by date, at most one per (year, week bucket)
    """
    if not samples:
        return []

    prices = np.array([float(s.price) for s in samples], dtype=float)
    mask = significant_mask(prices, peg, config)

    df = pd.DataFrame({
        "date": [s.date for s in samples],
        "price": prices,
        "order": np.arange(len(samples)),
    }).loc[mask].copy()
    if df.empty:
        return []

    df["abs_dev"] = np.abs(df["price"] - peg)
    df["year"] = [d.year for d in df["date"]]
    df["bucket"] = [d.day // config["bucket_days"] for d in df["date"]]

    # Largest deviation per bucket; the earlier sample wins a tie
    df = df.sort_values(["abs_dev", "order"], ascending=[False, True], kind="mergesort")
    winners = df.drop_duplicates(subset=["year", "bucket"], keep="first")
    winners = winners.sort_values(["date", "order"], kind="mergesort")

    return [
        PegEvent(
            date=row.date,
            price=float(row.price),
            description=describe_deviation(deviation_pct(row.price, peg)),
        )
        for row in winners.itertuples(index=False)
    ]


def summarize_peg_events(events: Sequence[PegEvent], peg: float = IDEAL_PEG) -> PegStatistics:
    """Max/average deviation and depeg count used by the peg stability scorer."""
    if not events:
        return PegStatistics(0.0, 0.0, 0, None)

    deviations = np.array([deviation_pct(e.price, peg) for e in events])
    threshold = PEG_SCORING["depeg_threshold_pct"]
    depegs = [e for e, d in zip(events, deviations) if d > threshold]
    worst = max(depegs, key=lambda e: deviation_pct(e.price, peg)) if depegs else None

    return PegStatistics(
        max_deviation_pct=float(deviations.max()),
        avg_deviation_pct=float(deviations.mean()),
        depeg_count=len(depegs),
        worst_event=worst,
    )


def samples_from_market_chart(prices: Sequence[Sequence[float]]) -> List[PriceSample]:
    """
    Convert provider [[timestamp_ms, price], ...] pairs into daily samples.

    One sample per UTC day (the last quote of the day wins), ascending.
    """
    by_day = {}
    for timestamp_ms, price in prices:
        if price is None:
            continue
        day = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).date()
        by_day[day] = float(price)
    return [PriceSample(date=day, price=by_day[day]) for day in sorted(by_day)]
