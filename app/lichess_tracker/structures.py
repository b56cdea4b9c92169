from typing import Any, Generic, TypedDict, TypeVar

T = TypeVar("T")


class RequestResult(TypedDict, Generic[T]):
    """
    Uniform outcome of every network operation.
    Exactly one of ``data`` and ``error`` is not None.
    """
    data: T | None
    error: str | None


def success(data: T) -> RequestResult[T]:
    return {"data": data, "error": None}


def failure(error: str) -> RequestResult[Any]:
    return {"data": None, "error": error}


class UserProfileInfo(TypedDict, total=False):
    bio: str
    firstName: str
    lastName: str
    realName: str
    country: str
    flag: str
    location: str


class UserStats(TypedDict):
    username: str
    title: str | None
    online: bool
    playing: bool
    profile: UserProfileInfo
    perfs: dict[str, dict[str, Any]]
    count: dict[str, int]
    createdAt: int | None  # epoch milliseconds
    seenAt: int | None


class PerfRating(TypedDict):
    rating: int | float
    games: int | float
    rd: int | float  # rating deviation
    prog: int | float  # progression since last period
    prov: bool  # provisional


class Leaderboard(TypedDict, total=False):
    users: list[dict[str, Any]]
    error: str


class PerfInfo(TypedDict):
    key: str
    name: str


class VariantInfo(TypedDict):
    key: str
    name: str
    short: str


class ClockInfo(TypedDict):
    limit: int | float  # seconds
    increment: int | float  # seconds


class Tournament(TypedDict):
    id: str
    name: str
    status: str  # created | started | finished | unknown
    nbPlayers: int | float
    startsAt: int | str | None
    finishesAt: int | str | None
    perf: PerfInfo | None
    rated: bool
    variant: VariantInfo | None
    position: Any
    hasMaxRating: bool
    maxRating: int | float | None
    minRating: int | float | None
    minRatedGames: int | float | None
    minutes: int | float
    clock: ClockInfo | None
