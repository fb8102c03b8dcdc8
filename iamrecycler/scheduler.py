"""
Rotation schedule — decides between "rotate now" and "wait until the next run".

Missed intervals are never compensated: an overdue policy yields exactly one
rotation, and the following schedule is anchored to that rotation, not to the
deadline that was missed.
"""

from __future__ import annotations

from datetime import datetime

from iamrecycler.models import DueCheck, RotationPolicy, RotationState, as_utc


def next_run(state: RotationState, policy: RotationPolicy) -> datetime | None:
    """When the next rotation becomes due, or None if it never ran."""
    if state.last_rotation_time is None:
        return None
    return as_utc(state.last_rotation_time) + policy.interval


def due_check(state: RotationState, policy: RotationPolicy, now: datetime) -> DueCheck:
    """Return DueCheck.now() if a rotation is due, else the remaining wait."""
    scheduled = next_run(state, policy)
    if scheduled is None:
        return DueCheck.now()

    now = as_utc(now)
    if now >= scheduled:
        return DueCheck.now()
    return DueCheck.after(scheduled - now)
