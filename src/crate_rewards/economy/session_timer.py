"""
Workout session timing.

Elapsed time is derived from the two recorded instants only, so a session
survives a failed save and can be re-submitted unchanged.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from ..exceptions import ValidationError
from ..models.account import WorkoutSession


_ONE_MS = timedelta(milliseconds=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_aware(value: datetime, field: str) -> None:
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValidationError(f"{field} must be timezone-aware", field=field)


def start_session(now: Optional[datetime] = None) -> WorkoutSession:
    """Open a new workout session starting at ``now``."""
    started_at = now or _utcnow()
    _require_aware(started_at, "started_at")
    return WorkoutSession(started_at=started_at)


def finish_session(session: WorkoutSession, now: Optional[datetime] = None) -> WorkoutSession:
    """
    Close a session.

    Finishing an already finished session returns it unchanged, so a retry
    after a storage failure credits the same duration.

    Raises:
        ValidationError: If either instant is naive or the end instant is
            before the start instant
    """
    _require_aware(session.started_at, "started_at")
    if session.is_finished:
        return session
    ended_at = now or _utcnow()
    _require_aware(ended_at, "ended_at")
    if ended_at < session.started_at:
        raise ValidationError("Session cannot end before it starts", field="ended_at")
    return session.model_copy(update={"ended_at": ended_at})


def elapsed_ms(session: WorkoutSession) -> int:
    """
    Elapsed milliseconds between start and end.

    Raises:
        ValidationError: If the session is still open or ends before it starts
    """
    if session.ended_at is None:
        raise ValidationError("Session has not been finished", field="ended_at")
    _require_aware(session.started_at, "started_at")
    _require_aware(session.ended_at, "ended_at")
    delta = session.ended_at - session.started_at
    if delta.total_seconds() < 0:
        raise ValidationError("Session cannot end before it starts", field="ended_at")
    return delta // _ONE_MS


def format_elapsed(duration_ms: int) -> str:
    """Format milliseconds as HH:MM:SS, the way the stopwatch displays it."""
    total_seconds = max(0, duration_ms) // 1000
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
