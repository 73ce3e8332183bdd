from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..exceptions import NotFoundError, PermissionDenied
from ..models import User
from ..schemas import PhotoUpdate, UserOut
from .auth import get_current_user, user_out

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserOut])
async def list_users(
    session: AsyncSession = Depends(get_session),
    current: User = Depends(get_current_user),
):
    rows = (await session.execute(select(User).order_by(User.id))).scalars().all()
    return [user_out(u) for u in rows]


@router.patch("/{uid}/photo", response_model=UserOut)
async def update_photo(
    uid: int,
    body: PhotoUpdate,
    session: AsyncSession = Depends(get_session),
    current: User = Depends(get_current_user),
) -> UserOut:
    if current.id != uid and not current.is_admin:
        raise PermissionDenied(
            "You can only update your own photo", code="user_forbidden"
        )
    user = await session.get(User, uid)
    if user is None:
        raise NotFoundError("user", uid)
    user.photo_url = body.photoUrl
    await session.commit()
    return user_out(user)
