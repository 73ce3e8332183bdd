import logging
import os
from datetime import timedelta
from typing import Any

import bcrypt
import jwt
from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import DISABLE_AUTH_RATE_LIMITS
from ..db import get_session
from ..models import User, UserRole
from ..schemas import UserCreate, UserLogin, TokenOut, UserOut
from ..services.access import ensure_active
from ..exceptions import http_problem
from ..time_utils import coerce_utc, utcnow

logger = logging.getLogger(__name__)


def get_jwt_secret() -> str:
    secret = os.getenv("JWT_SECRET")
    if not secret:
        raise RuntimeError("JWT_SECRET environment variable is required")
    if len(secret) < 32 or secret.lower() in {"secret", "changeme", "default"}:
        raise RuntimeError(
            "JWT_SECRET must be at least 32 characters and not a common default"
        )
    return secret


JWT_ALG = "HS256"
JWT_EXPIRE_SECONDS = 24 * 60 * 60


def _get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        parts = [ip.strip() for ip in forwarded.split(",") if ip.strip()]
        if parts:
            return parts[-1]
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip
    return request.client.host if request.client else ""


limiter = Limiter(key_func=_get_client_ip)
router = APIRouter(prefix="/auth", tags=["auth"])


def register_rate_limit() -> str:
    if DISABLE_AUTH_RATE_LIMITS:
        return "1000/second"
    return "5/minute"


def login_rate_limit() -> str:
    if DISABLE_AUTH_RATE_LIMITS:
        return "1000/second"
    return "10/minute"


class _BcryptContext:
    def hash(self, password: str) -> str:
        if not isinstance(password, str):
            raise TypeError("password must be a string")
        hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())
        return hashed.decode("utf-8")

    def verify(self, password: str, hashed: str) -> bool:
        if not isinstance(password, str) or not isinstance(hashed, str):
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            return False


pwd_context = _BcryptContext()


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    detail = exc.detail if isinstance(exc.detail, str) else ""
    if detail:
        message = f"rate limit exceeded: {detail}"
    else:
        message = "rate limit exceeded: please wait before submitting another request."
    return JSONResponse(
        status_code=429,
        content={
            "detail": message,
            "code": "rate_limit_exceeded",
        },
    )


def user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        username=user.username,
        fullName=user.full_name,
        email=user.email,
        photoUrl=user.photo_url,
        role=user.role,
        suspendedUntil=coerce_utc(user.suspended_until),
    )


def create_token(user: User) -> str:
    payload: dict[str, Any] = {
        "sub": str(user.id),
        "username": user.username,
        "role": user.role,
        "exp": utcnow() + timedelta(seconds=JWT_EXPIRE_SECONDS),
    }
    return jwt.encode(payload, get_jwt_secret(), algorithm=JWT_ALG)


def _extract_bearer_token(authorization: str | None) -> str:
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1]
    raise http_problem(
        status_code=401,
        detail="missing token",
        code="auth_missing_token",
    )


async def get_current_user(
    authorization: str | None = Header(None),
    session: AsyncSession = Depends(get_session),
) -> User:
    token = _extract_bearer_token(authorization)
    try:
        payload = jwt.decode(token, get_jwt_secret(), algorithms=[JWT_ALG])
    except jwt.ExpiredSignatureError:
        raise http_problem(
            status_code=401,
            detail="token expired",
            code="auth_token_expired",
        )
    except jwt.PyJWTError:
        raise http_problem(
            status_code=401,
            detail="invalid token",
            code="auth_invalid_token",
        )
    try:
        uid = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise http_problem(
            status_code=401,
            detail="invalid token",
            code="auth_invalid_token",
        )
    user = await session.get(User, uid)
    if not user:
        raise http_problem(
            status_code=401,
            detail="user not found",
            code="auth_user_not_found",
        )
    return user


@router.post("/register", response_model=UserOut, status_code=201)
@limiter.limit(register_rate_limit)
async def register(
    request: Request,
    body: UserCreate,
    session: AsyncSession = Depends(get_session),
):
    existing = (
        await session.execute(
            select(User).where(func.lower(User.username) == body.username.lower())
        )
    ).scalar_one_or_none()
    if existing:
        raise http_problem(
            status_code=400,
            detail="Username already taken",
            code="auth_username_exists",
        )
    email_taken = (
        await session.execute(select(User.id).where(User.email == body.email))
    ).scalar_one_or_none()
    if email_taken is not None:
        raise http_problem(
            status_code=400,
            detail="Email already registered",
            code="auth_email_exists",
        )

    # Self-registration always yields a player; admins are seeded.
    user = User(
        username=body.username,
        password_hash=pwd_context.hash(body.password),
        full_name=body.fullName,
        email=body.email,
        photo_url=body.photoUrl,
        role=UserRole.PLAYER.value,
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration.
        await session.rollback()
        raise http_problem(
            status_code=400,
            detail="Username or email already registered",
            code="auth_username_exists",
        )
    logger.info("Registered user %s (%s)", user.id, user.username)
    return user_out(user)


@router.post("/login", response_model=TokenOut)
@limiter.limit(login_rate_limit)
async def login(
    request: Request,
    body: UserLogin,
    session: AsyncSession = Depends(get_session),
):
    username = body.username.strip().lower()
    user = (
        await session.execute(
            select(User).where(func.lower(User.username) == username)
        )
    ).scalar_one_or_none()
    if not user or not pwd_context.verify(body.password, user.password_hash):
        raise http_problem(
            status_code=401,
            detail="Incorrect username or password",
            code="auth_invalid_credentials",
        )
    ensure_active(user)
    return TokenOut(access_token=create_token(user), user=user_out(user))


@router.post("/logout")
async def logout(current: User = Depends(get_current_user)):
    # Tokens are stateless; the client drops its copy.
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserOut)
async def read_me(current: User = Depends(get_current_user)):
    return user_out(current)
