import enum

from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    JSON,
    Integer,
    Boolean,
    Text,
    Index,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from .db import Base
from .time_utils import utcnow_naive


class UserRole(str, enum.Enum):
    PLAYER = "player"
    ADMIN = "admin"


class PlayerCategory(str, enum.Enum):
    """Ranking tiers, weakest first."""

    C = "C"
    B = "B"
    A = "A"
    S = "S"
    SS = "SS"


class MatchStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class User(Base):
    __tablename__ = "user"
    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    full_name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True)
    photo_url = Column(String, nullable=True)
    role = Column(String, nullable=False, default=UserRole.PLAYER.value)
    suspended_until = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("uq_user_username_lower", func.lower(username), unique=True),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


class Ranking(Base):
    __tablename__ = "ranking"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    is_public = Column(Boolean, nullable=False, default=True)
    requires_validation = Column(Boolean, nullable=False, default=False)
    created_by_id = Column(Integer, ForeignKey("user.id"), nullable=False)


class PlayerRanking(Base):
    """Ledger entry: a player's standing inside one ranking."""

    __tablename__ = "player_ranking"
    id = Column(Integer, primary_key=True, autoincrement=True)
    player_id = Column(Integer, ForeignKey("user.id"), nullable=False)
    ranking_id = Column(Integer, ForeignKey("ranking.id"), nullable=False)
    category = Column(String(2), nullable=False, default=PlayerCategory.C.value)
    points = Column(Integer, nullable=False, default=0)
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint(
            "player_id",
            "ranking_id",
            name="uq_player_ranking_player_id_ranking_id",
        ),
    )


class Location(Base):
    __tablename__ = "location"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=True)
    coordinates = Column(JSON, nullable=True)  # {"lat": float, "lng": float}
    created_by_id = Column(Integer, ForeignKey("user.id"), nullable=False)


class Match(Base):
    __tablename__ = "match"
    id = Column(Integer, primary_key=True, autoincrement=True)
    ranking_id = Column(Integer, ForeignKey("ranking.id"), nullable=False)
    player1_id = Column(Integer, ForeignKey("user.id"), nullable=False)
    player2_id = Column(Integer, ForeignKey("user.id"), nullable=False)
    location_id = Column(Integer, ForeignKey("location.id"), nullable=True)
    location_name = Column(String, nullable=True)  # free text for unlisted courts
    photo_url = Column(String, nullable=True)
    status = Column(String, nullable=False, default=MatchStatus.PENDING.value)
    rejection_reason = Column(Text, nullable=True)
    played_at = Column(
        DateTime, nullable=False, default=utcnow_naive, server_default=func.now()
    )
    created_at = Column(
        DateTime, nullable=False, default=utcnow_naive, server_default=func.now()
    )
    # {"sets": [{"player1Score", "player2Score"}...], "tiebreak": {...} | None}
    score = Column(JSON, nullable=False)

    __table_args__ = (
        Index("ix_match_ranking_status", "ranking_id", "status"),
    )
