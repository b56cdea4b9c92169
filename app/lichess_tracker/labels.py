"""Display classifiers shared by the profile, leaderboard and tournament pages."""
import datetime
from typing import Any, Iterable

from app.lichess_tracker.formatting import parse_number, to_number
from app.lichess_tracker.structures import Tournament

UNKNOWN_LABEL = "unknown"
STARTED_LABEL = "Started"

TOURNAMENT_FILTERS = ("all", "live", "upcoming", "starting-soon")

# Upper bounds (exclusive) of the estimated game duration in seconds.
CLOCK_THRESHOLDS = (
    (180, "bullet"),
    (480, "blitz"),
    (1500, "rapid"),
)
# Moves assumed per game when turning the increment into an estimate.
ESTIMATED_MOVES = 40


def classify_minutes(minutes: Any) -> str:
    mins = to_number(minutes)
    if mins < 3:
        return "bullet"
    if mins <= 8:
        return "blitz"
    if mins <= 25:
        return "rapid"
    return "classical"


def classify_clock(limit: Any, increment: Any) -> str:
    estimated = to_number(limit) + ESTIMATED_MOVES * to_number(increment)
    for bound, category in CLOCK_THRESHOLDS:
        if estimated < bound:
            return category
    return "classical"


def time_control_category(tournament: Tournament) -> str:
    """Category from the clock when the tournament has one, else from its length in minutes."""
    clock = tournament.get("clock")
    if clock:
        return classify_clock(clock.get("limit"), clock.get("increment"))
    return classify_minutes(tournament.get("minutes"))


def format_duration(minutes: Any) -> str:
    mins = int(to_number(minutes))
    if mins < 60:
        return f"{mins}m"
    hours, remaining = divmod(mins, 60)
    return f"{hours}h {remaining}m" if remaining else f"{hours}h"


def parse_timestamp(value: Any) -> datetime.datetime | None:
    """Epoch milliseconds (number or numeric string) or ISO 8601 text, as an aware UTC datetime."""
    if value is None or isinstance(value, bool):
        return None
    millis = parse_number(value)
    if millis is not None:
        try:
            return datetime.datetime.fromtimestamp(millis / 1000, datetime.UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            parsed = datetime.datetime.fromisoformat(value.strip())
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=datetime.UTC)
        return parsed
    return None


def format_timestamp(value: Any) -> str:
    parsed = parse_timestamp(value)
    if parsed is None:
        return UNKNOWN_LABEL
    return parsed.date().isoformat()


def _until(starts_at: Any, now: datetime.datetime | None) -> datetime.timedelta | None:
    start = parse_timestamp(starts_at)
    if start is None:
        return None
    return start - (now or datetime.datetime.now(datetime.UTC))


def time_until_start(starts_at: Any, now: datetime.datetime | None = None) -> str | None:
    diff = _until(starts_at, now)
    if diff is None:
        return None
    if diff <= datetime.timedelta(0):
        return STARTED_LABEL

    hours, rest = divmod(diff.seconds, 3600)
    minutes = rest // 60
    if diff.days > 0:
        return f"Starts in {diff.days}d {hours}h"
    if hours > 0:
        return f"Starts in {hours}h {minutes}m"
    return f"Starts in {minutes}m"


def is_starting_soon(tournament: Tournament, now: datetime.datetime | None = None) -> bool:
    diff = _until(tournament.get("startsAt"), now)
    return diff is not None and datetime.timedelta(0) < diff < datetime.timedelta(days=1)


def filter_tournaments(
        tournaments: Iterable[Tournament],
        mode: str = "all",
        now: datetime.datetime | None = None
) -> list[Tournament]:
    """
    Apply one of the tournament page filters.
    ``live`` keeps started tournaments, ``upcoming`` created ones and
    ``starting-soon`` those beginning within a day. Anything else keeps all.
    """
    if mode == "live":
        return [t for t in tournaments if t["status"] == "started"]
    if mode == "upcoming":
        return [t for t in tournaments if t["status"] == "created"]
    if mode == "starting-soon":
        return [t for t in tournaments if is_starting_soon(t, now)]
    return list(tournaments)
