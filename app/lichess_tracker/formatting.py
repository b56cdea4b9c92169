"""
Pure normalizers turning raw Lichess payloads into the shapes in ``structures``.

None of these functions raise on malformed input: unknown types collapse to
defaults (0, False, "", None) so that one odd record never breaks a page.

Upstream schema assumptions (observed on ``GET /api/tournament``):

* ``status`` is a legacy numeric code (10, 20, 30) or, in newer payloads,
  already one of ``created``, ``started``, ``finished``.
* ``minRating`` / ``maxRating`` are ``{"rating": n}`` objects or bare numbers.
* ``minRatedGames`` is ``{"nb": n}`` or a bare number.
"""
import math
from typing import Any

from app.logger import logger
from app.lichess_tracker.structures import PerfRating, Tournament

RATING_CATEGORIES = ("bullet", "blitz", "rapid", "classical", "correspondence")

TOURNAMENT_STATUSES = {10: "created", 20: "started", 30: "finished"}
UNKNOWN_STATUS = "unknown"

# Candidate source keys per output field. Names take the first non-empty
# value; ids and bounds take the first value that is present, so 0 survives.
NAME_FIELDS = ("fullName", "name")
ID_FIELDS = ("id",)
MAX_RATING_FIELDS = ("maxRating",)
MIN_RATING_FIELDS = ("minRating",)
MIN_RATED_GAMES_FIELDS = ("minRatedGames",)


def parse_number(value: Any) -> int | float | None:
    """Parse ``value`` as a finite number, or return None. Integral values come back as int."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def to_number(value: Any) -> int | float:
    number = parse_number(value)
    return 0 if number is None else number


def to_text(value: Any) -> str:
    return str(value) if value else ""


def first_of(raw: dict, fields: tuple[str, ...]) -> Any:
    for field in fields:
        value = raw.get(field)
        if value:
            return value
    return None


def first_present(raw: dict, fields: tuple[str, ...]) -> Any:
    for field in fields:
        value = raw.get(field)
        if value is not None:
            return value
    return None


def unwrap_bound(value: Any, key: str) -> int | float | None:
    """``{"rating": 1500}``, ``1500`` and ``"1500"`` all give 1500; anything else gives None."""
    if isinstance(value, dict):
        value = value.get(key)
    if value is None:
        return None
    return parse_number(value)


def tournament_status(value: Any) -> str:
    if isinstance(value, str):
        return value if value in TOURNAMENT_STATUSES.values() else UNKNOWN_STATUS
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return TOURNAMENT_STATUSES.get(value, UNKNOWN_STATUS)
    return UNKNOWN_STATUS


def _timestamp(value: Any) -> int | float | str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, str)):
        return value
    return None


def format_ratings(perfs: Any) -> dict[str, PerfRating]:
    """
    Normalize a ``perfs`` mapping from a user payload.
    Categories missing from the input are left out rather than zero-filled.
    """
    if not isinstance(perfs, dict):
        return {}

    ratings = {}
    for category in RATING_CATEGORIES:
        perf = perfs.get(category)
        if not isinstance(perf, dict):
            continue
        ratings[category] = PerfRating(
            rating=to_number(perf.get("rating")),
            games=to_number(perf.get("games")),
            rd=to_number(perf.get("rd")),
            prog=to_number(perf.get("prog")),
            prov=bool(perf.get("prov")),
        )
    return ratings


def format_tournament(tournament: Any) -> Tournament | None:
    """
    Normalize one raw tournament record.

    :param tournament: a record from any bucket of ``GET /api/tournament``,
        or a record previously returned by this function.
    :return: the normalized record, or None when the input is not a mapping.
    """
    if not isinstance(tournament, dict):
        return None

    perf = tournament.get("perf")
    variant = tournament.get("variant")
    clock = tournament.get("clock")

    return Tournament(
        id=to_text(first_present(tournament, ID_FIELDS)),
        name=to_text(first_of(tournament, NAME_FIELDS)),
        status=tournament_status(tournament.get("status")),
        nbPlayers=to_number(tournament.get("nbPlayers")),
        startsAt=_timestamp(tournament.get("startsAt")),
        finishesAt=_timestamp(tournament.get("finishesAt")),
        perf={
            "key": to_text(perf.get("key")),
            "name": to_text(perf.get("name")),
        } if isinstance(perf, dict) else None,
        rated=bool(tournament.get("rated")),
        variant={
            "key": to_text(variant.get("key")),
            "name": to_text(variant.get("name")),
            "short": to_text(variant.get("short")),
        } if isinstance(variant, dict) else None,
        position=tournament.get("position"),
        hasMaxRating=bool(tournament.get("hasMaxRating")),
        maxRating=unwrap_bound(first_present(tournament, MAX_RATING_FIELDS), "rating"),
        minRating=unwrap_bound(first_present(tournament, MIN_RATING_FIELDS), "rating"),
        minRatedGames=unwrap_bound(first_present(tournament, MIN_RATED_GAMES_FIELDS), "nb"),
        minutes=to_number(tournament.get("minutes")),
        clock={
            "limit": to_number(clock.get("limit")),
            "increment": to_number(clock.get("increment")),
        } if isinstance(clock, dict) else None,
    )


def format_tournament_list(
        payload: Any,
        bucket: str = "created",
        include_finished: bool = False
) -> list[Tournament]:
    """Normalize one bucket (``created``, ``started``, ``finished``) of a tournament listing."""
    if not isinstance(payload, dict):
        return []
    raw_tournaments = payload.get(bucket)
    if not isinstance(raw_tournaments, list):
        return []

    tournaments = []
    for raw in raw_tournaments:
        tournament = format_tournament(raw)
        if tournament is None:
            logger.debug("Skipping non-object tournament record in bucket %s", bucket)
            continue
        if tournament["status"] == "finished" and not include_finished:
            continue
        tournaments.append(tournament)
    return tournaments
