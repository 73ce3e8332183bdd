import asyncio
import logging

from sqlalchemy import func, select

from app import db
from app.config import SEED_ADMIN_EMAIL, SEED_ADMIN_PASSWORD, SEED_ADMIN_USERNAME
from app.models import Location, Ranking, User, UserRole
from app.routers.auth import pwd_context

logger = logging.getLogger("seed")


async def ensure_admin(session) -> User:
    admin = (
        await session.execute(
            select(User).where(func.lower(User.username) == SEED_ADMIN_USERNAME.lower())
        )
    ).scalar_one_or_none()
    if admin is not None:
        return admin
    if not SEED_ADMIN_PASSWORD:
        raise RuntimeError("SEED_ADMIN_PASSWORD environment variable is required")
    admin = User(
        username=SEED_ADMIN_USERNAME,
        password_hash=pwd_context.hash(SEED_ADMIN_PASSWORD),
        full_name="Administrator",
        email=SEED_ADMIN_EMAIL,
        role=UserRole.ADMIN.value,
    )
    session.add(admin)
    await session.flush()
    logger.info("Created admin user %s", admin.username)
    return admin


async def main():
    db.get_engine()
    async with db.AsyncSessionLocal() as s:
        admin = await ensure_admin(s)

        existing_rankings = {
            x.name for x in (await s.execute(select(Ranking))).scalars().all()
        }
        for name, description, public, validation in [
            ("Open Ladder", "Public ladder for all club members", True, False),
            ("Club Championship", "Results checked by an admin", True, True),
        ]:
            if name not in existing_rankings:
                s.add(
                    Ranking(
                        name=name,
                        description=description,
                        is_public=public,
                        requires_validation=validation,
                        created_by_id=admin.id,
                    )
                )

        existing_locations = {
            x.name for x in (await s.execute(select(Location))).scalars().all()
        }
        for name, address in [("Central Courts", "1 Court Street")]:
            if name not in existing_locations:
                s.add(Location(name=name, address=address, created_by_id=admin.id))
        await s.commit()
    await db.dispose_engine()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
