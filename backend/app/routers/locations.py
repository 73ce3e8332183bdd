from fastapi import APIRouter, Depends, Response
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..exceptions import ConflictError, NotFoundError
from ..models import Location, Match, User
from ..schemas import LocationCreate, LocationOut, LocationUpdate
from .admin import require_admin
from .auth import get_current_user

router = APIRouter(prefix="/locations", tags=["locations"])


def location_out(location: Location) -> LocationOut:
    return LocationOut(
        id=location.id,
        name=location.name,
        address=location.address,
        coordinates=location.coordinates,
        createdById=location.created_by_id,
    )


async def _get_location(session: AsyncSession, lid: int) -> Location:
    location = await session.get(Location, lid)
    if location is None:
        raise NotFoundError("location", lid)
    return location


@router.post("", response_model=LocationOut, status_code=201)
async def create_location(
    body: LocationCreate,
    session: AsyncSession = Depends(get_session),
    admin: User = Depends(require_admin),
) -> LocationOut:
    location = Location(
        name=body.name,
        address=body.address,
        coordinates=body.coordinates.model_dump() if body.coordinates else None,
        created_by_id=admin.id,
    )
    session.add(location)
    await session.commit()
    return location_out(location)


@router.get("", response_model=list[LocationOut])
async def list_locations(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    rows = (await session.execute(select(Location).order_by(Location.id))).scalars().all()
    return [location_out(loc) for loc in rows]


@router.patch("/{lid}", response_model=LocationOut)
async def update_location(
    lid: int,
    body: LocationUpdate,
    session: AsyncSession = Depends(get_session),
    admin: User = Depends(require_admin),
) -> LocationOut:
    location = await _get_location(session, lid)
    data = body.model_dump(exclude_unset=True)
    if data.get("name"):
        location.name = data["name"].strip()
    if "address" in data:
        location.address = data["address"]
    if "coordinates" in data:
        location.coordinates = data["coordinates"]
    await session.commit()
    return location_out(location)


@router.delete("/{lid}", status_code=204)
async def delete_location(
    lid: int,
    session: AsyncSession = Depends(get_session),
    admin: User = Depends(require_admin),
) -> Response:
    location = await _get_location(session, lid)
    in_use = (
        await session.execute(
            select(func.count()).select_from(Match).where(Match.location_id == lid)
        )
    ).scalar_one()
    if in_use:
        raise ConflictError(
            f"Location is used by {in_use} recorded match(es)",
            code="location_in_use",
        )
    await session.delete(location)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError(
            "Location is used by recorded matches", code="location_in_use"
        )
    return Response(status_code=204)
