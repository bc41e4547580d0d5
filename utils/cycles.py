from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Optional

from models import CompletionCycle, CycleKind


def recompute_days_to_complete(cycles: Iterable[CompletionCycle]) -> List[CompletionCycle]:
    """Chronological copies of ``cycles`` with days since the previous pass filled in."""
    ordered = sorted(cycles, key=lambda c: (c.completed_at, c.id or 0))
    result: List[CompletionCycle] = []
    previous: Optional[date] = None
    for cycle in ordered:
        days = (cycle.completed_at - previous).days if previous is not None else None
        result.append(cycle.model_copy(update={"days_to_complete": days}))
        previous = cycle.completed_at
    return result


def average_cycle_days(cycles: Iterable[CompletionCycle]) -> Optional[int]:
    durations = [c.days_to_complete for c in cycles if c.days_to_complete and c.days_to_complete > 0]
    if not durations:
        return None
    # round half away from zero, durations are positive
    return (2 * sum(durations) + len(durations)) // (2 * len(durations))


def days_since_last(cycles: Iterable[CompletionCycle], today: date) -> Optional[int]:
    dates = [c.completed_at for c in cycles]
    if not dates:
        return None
    return (today - max(dates)).days


def summarize_cycles(cycles: Iterable[CompletionCycle], today: date) -> Dict[str, dict]:
    cycles = list(cycles)
    summary = {}
    for kind in CycleKind:
        of_kind = recompute_days_to_complete(c for c in cycles if c.kind is kind)
        summary[kind.value] = {
            "count": len(of_kind),
            "average_days": average_cycle_days(of_kind),
            "days_since_last": days_since_last(of_kind, today),
        }
    return summary


def load_cycles(conn, owner_id: int) -> List[CompletionCycle]:
    cursor = conn.cursor()
    cursor.execute(
        """
        SELECT id, user_id, kind, completed_at, days_to_complete
        FROM completion_cycles
        WHERE user_id = ?
        ORDER BY completed_at, id
        """,
        (owner_id,),
    )
    return [
        CompletionCycle(
            id=row["id"],
            owner_id=row["user_id"],
            kind=row["kind"],
            completed_at=row["completed_at"],
            days_to_complete=row["days_to_complete"],
        )
        for row in cursor.fetchall()
    ]


def add_cycle(conn, owner_id: int, kind: CycleKind, completed_at: date) -> List[CompletionCycle]:
    """Record a completed pass and refresh ``days_to_complete`` for that kind."""
    kind = CycleKind(kind)
    cursor = conn.cursor()
    with conn:
        cursor.execute(
            "INSERT INTO completion_cycles (user_id, kind, completed_at) VALUES (?, ?, ?)",
            (owner_id, kind.value, completed_at.isoformat()),
        )
        refreshed = recompute_days_to_complete(c for c in load_cycles(conn, owner_id) if c.kind is kind)
        cursor.executemany(
            "UPDATE completion_cycles SET days_to_complete = ? WHERE id = ?",
            [(c.days_to_complete, c.id) for c in refreshed],
        )
    return refreshed
