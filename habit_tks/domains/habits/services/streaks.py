"""Day-run helpers shared by the habit service and analytics."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Tuple


def streaks(days: Iterable[date], today: Optional[date] = None) -> Tuple[int, int]:
    """Return ``(current, best)`` runs of consecutive calendar days.

    The current run only counts while its latest day is today or yesterday.
    """
    ordered = sorted(set(days), reverse=True)
    if not ordered:
        return 0, 0
    runs = []
    run = 1
    for later, earlier in zip(ordered, ordered[1:]):
        if (later - earlier).days == 1:
            run += 1
        else:
            runs.append(run)
            run = 1
    runs.append(run)

    today = today or datetime.utcnow().date()
    current = runs[0] if (today - ordered[0]).days <= 1 else 0
    return current, max(runs)


def current_streak(days: Iterable[date], today: Optional[date] = None) -> int:
    current, _ = streaks(days, today)
    return current
