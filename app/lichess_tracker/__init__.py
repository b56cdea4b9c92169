import asyncio
import json
import os
from typing import Any, Optional
from urllib.parse import quote

import aiohttp

from app.logger import logger
from app.lichess_tracker.errors import LichessError, ValidationError, HttpError, NetworkError, DecodeError
from app.lichess_tracker.formatting import format_ratings, format_tournament, format_tournament_list
from app.lichess_tracker.http_session import get_session, close_session
from app.lichess_tracker.structures import RequestResult, UserStats, Leaderboard, success, failure

LICHESS_API_BASE = os.getenv("LICHESS_API_BASE", "https://lichess.org/api").rstrip("/")
LICHESS_ENRICH_LIMIT = int(os.getenv("LICHESS_ENRICH_LIMIT", "50"))

if not LICHESS_API_BASE:
    logger.error("LICHESS_API_BASE is empty. Please set it in your .env file or leave it unset.")
    raise RuntimeError("LICHESS_API_BASE is empty. Please set it in your .env file or leave it unset.")

LEADERBOARD_CATEGORIES = ("bullet", "blitz", "rapid", "classical")
# Largest list the leaderboard endpoint honours.
LEADERBOARD_MAX = 200


async def _fetch_json(url: str, headers: Optional[dict[str, str]], method: str) -> Any:
    request_headers = {"Accept": "application/json", **(headers or {})}
    session = get_session()

    try:
        async with session.request(method, url, headers=request_headers) as response:
            if not 200 <= response.status < 300:
                raise HttpError(response.status)
            body = await response.read()
    except aiohttp.ClientError as e:
        raise NetworkError(str(e) or type(e).__name__) from e
    except asyncio.TimeoutError as e:
        raise NetworkError(f"request to {url} timed out") from e

    # JSON bodies are UTF-8; a bad byte sequence is a decoding failure like bad syntax.
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise DecodeError(f"invalid JSON response: {e}") from e


async def api_request(
        url: str,
        headers: Optional[dict[str, str]] = None,
        method: str = "GET"
) -> RequestResult[Any]:
    """
    Perform one request against the Lichess API and decode its JSON body.
    Failures never propagate: they are logged and returned in ``error``.
    """
    try:
        data = await _fetch_json(url, headers, method)
    except HttpError as e:
        logger.warning(f"{method} {url} -> {e.status}")
        return failure(str(e))
    except LichessError as e:
        logger.error(f"{type(e).__name__} in api_request for {url}: {e}")
        return failure(str(e))
    except Exception as e:
        logger.error(f"Unexpected error in api_request for {url}: {e}", exc_info=True, stack_info=True)
        return failure(str(e) or type(e).__name__)

    return success(data)


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _validate_username(username: Any) -> str:
    if not isinstance(username, str) or not username.strip():
        raise ValidationError("username required")
    return username.strip()


async def get_user_profile(username: str) -> RequestResult[dict[str, Any]]:
    try:
        username = _validate_username(username)
    except ValidationError as e:
        logger.debug(f"Rejected profile lookup for {username!r}: {e}")
        return failure(str(e))

    return await api_request(f"{LICHESS_API_BASE}/user/{quote(username, safe='')}")


async def get_user_stats(username: str) -> RequestResult[UserStats]:
    """
    Fetch a profile and keep only the fields the profile page shows.
    ``profile``, ``perfs`` and ``count`` are always dicts.
    """
    result = await get_user_profile(username)
    if result["error"]:
        return result

    user = _as_dict(result["data"])
    name = user.get("username")
    return success(UserStats(
        username=name if isinstance(name, str) and name.strip() else username.strip(),
        title=user.get("title"),
        online=bool(user.get("online")),
        playing=bool(user.get("playing")),
        profile=_as_dict(user.get("profile")),
        perfs=_as_dict(user.get("perfs")),
        count=_as_dict(user.get("count")),
        createdAt=user.get("createdAt"),
        seenAt=user.get("seenAt"),
    ))


def _merge_profile(user: dict[str, Any], profile: dict[str, Any], category: str) -> dict[str, Any]:
    """Overlay a full profile on a leaderboard entry, keeping the leaderboard's own perf for ``category``."""
    profile_perfs = _as_dict(profile.get("perfs"))
    user_perfs = _as_dict(user.get("perfs"))
    return {
        **user,
        **profile,
        "perfs": {
            **profile_perfs,
            category: {
                **_as_dict(profile_perfs.get(category)),
                **_as_dict(user_perfs.get(category)),
            },
        },
    }


async def _enrich_users(users: list[dict[str, Any]], category: str) -> list[dict[str, Any]]:
    enriched = []
    for index, user in enumerate(users):
        if index >= LICHESS_ENRICH_LIMIT or not isinstance(user, dict):
            enriched.append(user)
            continue

        profile = await get_user_profile(user.get("username"))
        if profile["error"] or not isinstance(profile["data"], dict):
            logger.warning(f"Failed to fetch profile for {user.get('username')}: {profile['error']}")
            enriched.append(user)
            continue
        enriched.append(_merge_profile(user, profile["data"], category))
    return enriched


async def get_leaderboards(nb: int = 20, include_game_counts: bool = True) -> RequestResult[dict[str, Leaderboard]]:
    """
    Fetch the top ``nb`` players of every leaderboard category, one request at a time.

    A failing category is reported as ``{"users": [], "error": ...}`` without
    affecting the others, so the returned result itself never carries an error.
    :param nb: list size, passed through unclamped
    :param include_game_counts: fetch each listed player's full profile as well
    """
    if isinstance(nb, int) and nb > LEADERBOARD_MAX:
        logger.warning(f"Requested {nb} leaderboard entries, Lichess serves at most {LEADERBOARD_MAX}")

    leaderboards: dict[str, Leaderboard] = {}
    for category in LEADERBOARD_CATEGORIES:
        result = await api_request(f"{LICHESS_API_BASE}/player/top/{nb}/{category}")
        if result["error"]:
            leaderboards[category] = {"users": [], "error": result["error"]}
            continue

        data = _as_dict(result["data"])
        users = data.get("users") if isinstance(data.get("users"), list) else []
        if include_game_counts and users:
            logger.debug(f"Enriching {min(len(users), LICHESS_ENRICH_LIMIT)} {category} players")
            users = await _enrich_users(users, category)
        leaderboards[category] = {**data, "users": users}

    return success(leaderboards)


async def get_current_tournaments() -> RequestResult[dict[str, Any]]:
    return await api_request(f"{LICHESS_API_BASE}/tournament")
