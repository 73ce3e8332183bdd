from typing import Any, Dict, Literal, Optional
from datetime import datetime
from urllib.parse import urlparse
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    field_validator,
)

MIN_PASSWORD_LENGTH = 8

CategoryLiteral = Literal["C", "B", "A", "S", "SS"]
StatusLiteral = Literal["pending", "approved", "rejected"]


def _strip_required(value: Any, field: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValueError(f"{field} must not be empty")
    return trimmed


def _validate_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    trimmed = _strip_required(value, "url")
    if trimmed.startswith("/"):
        return trimmed
    parsed = urlparse(trimmed)
    if parsed.scheme.lower() not in {"http", "https"}:
        raise ValueError("url must start with http:// or https://")
    if not parsed.netloc:
        raise ValueError("url must include a host")
    return trimmed


# -----------------------------------------------------------------------------
# Users / auth
# -----------------------------------------------------------------------------
class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    fullName: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    photoUrl: Optional[str] = None

    @field_validator("username", "fullName", mode="before")
    @classmethod
    def _strip(cls, value: str, info) -> str:
        return _strip_required(value, info.field_name)

    @field_validator("email", mode="before")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        trimmed = _strip_required(value, "email").lower()
        local, sep, domain = trimmed.partition("@")
        if not sep or not local or "." not in domain:
            raise ValueError("email must be a valid address")
        return trimmed

    @field_validator("photoUrl", mode="before")
    @classmethod
    def _validate_photo(cls, value: Optional[str]) -> Optional[str]:
        return _validate_url(value)


class UserLogin(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserOut(BaseModel):
    id: int
    username: str
    fullName: str
    email: str
    photoUrl: Optional[str] = None
    role: Literal["player", "admin"]
    suspendedUntil: Optional[datetime] = None


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class PhotoUpdate(BaseModel):
    photoUrl: str

    @field_validator("photoUrl", mode="before")
    @classmethod
    def _validate_photo(cls, value: str) -> str:
        return _validate_url(value)


class SuspendPlayerIn(BaseModel):
    days: StrictInt = Field(..., gt=0, le=3650)


class SuspendedPlayerOut(BaseModel):
    id: int
    username: str
    fullName: str
    suspendedUntil: Optional[datetime] = None


# -----------------------------------------------------------------------------
# Rankings and ledger
# -----------------------------------------------------------------------------
class RankingCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    isPublic: bool = True
    requiresValidation: bool = False

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        return _strip_required(value, "name")


class RankingUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    isPublic: Optional[bool] = None
    requiresValidation: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _strip_required(value, "name")


class RankingOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    isPublic: bool
    requiresValidation: bool
    createdById: int


class PlayerRankingCreate(BaseModel):
    playerId: int
    rankingId: int
    category: CategoryLiteral = "C"
    points: int = Field(default=0, ge=0)
    wins: int = Field(default=0, ge=0)
    losses: int = Field(default=0, ge=0)


class PlayerRankingOut(BaseModel):
    id: int
    playerId: int
    rankingId: int
    category: CategoryLiteral
    points: int
    wins: int
    losses: int


class RankingPlayerOut(BaseModel):
    playerId: int
    username: str
    fullName: str
    photoUrl: Optional[str] = None
    category: CategoryLiteral
    points: int
    position: int
    wins: int
    losses: int
    isCurrentUser: bool = False


# -----------------------------------------------------------------------------
# Locations
# -----------------------------------------------------------------------------
class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class LocationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    address: Optional[str] = None
    coordinates: Optional[Coordinates] = None

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        return _strip_required(value, "name")


class LocationUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    address: Optional[str] = None
    coordinates: Optional[Coordinates] = None

    model_config = ConfigDict(extra="forbid")


class LocationOut(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    createdById: int


# -----------------------------------------------------------------------------
# Matches
# -----------------------------------------------------------------------------
class MatchCreate(BaseModel):
    """Submitted match.

    ``score`` is ``{"sets": [{"player1Score": 6, "player2Score": 4}, ...],
    "tiebreak": {...}}``; its contents are checked by
    ``services.validation.validate_match_score`` so the error messages stay
    the same for API and service callers.
    """

    rankingId: int
    player1Id: Optional[int] = None
    player2Id: int
    locationId: Optional[int] = None
    locationName: Optional[str] = Field(default=None, max_length=200)
    photoUrl: Optional[str] = None
    playedAt: Optional[datetime] = None
    score: Dict[str, Any]
    hasTiebreak: bool = False

    @field_validator("photoUrl", mode="before")
    @classmethod
    def _validate_photo(cls, value: Optional[str]) -> Optional[str]:
        return _validate_url(value)

    @field_validator("locationName", mode="before")
    @classmethod
    def _normalize_location_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError("locationName must be a string")
        return value.strip() or None


class MatchValidateIn(BaseModel):
    approved: StrictBool
    rejectionReason: Optional[str] = Field(default=None, max_length=1000)


class RejectionReasonUpdate(BaseModel):
    rejectionReason: str = Field(..., max_length=1000)


class ScoreSummaryOut(BaseModel):
    sets: Dict[str, int]
    player1Wins: bool
    tiebreak: Optional[Dict[str, int]] = None


class MatchOut(BaseModel):
    id: int
    rankingId: int
    player1Id: int
    player2Id: int
    locationId: Optional[int] = None
    locationName: Optional[str] = None
    photoUrl: Optional[str] = None
    status: StatusLiteral
    rejectionReason: Optional[str] = None
    playedAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None
    score: Dict[str, Any]
    summary: ScoreSummaryOut


class PlayerBriefOut(BaseModel):
    id: int
    username: str
    fullName: str
    photoUrl: Optional[str] = None


class RankingBriefOut(BaseModel):
    id: int
    name: str


class LocationBriefOut(BaseModel):
    id: int
    name: str


class MatchDetailOut(MatchOut):
    player1: PlayerBriefOut
    player2: PlayerBriefOut
    ranking: RankingBriefOut
    location: Optional[LocationBriefOut] = None
