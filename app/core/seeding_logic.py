from loguru import logger
from app.core.config import settings
from app.core.database import AsyncSessionLocal
from app.services.auth_service import get_user_by_email, create_super_admin
from app.services.settings_service import get_or_create_settings


async def seed_settings():
    async with AsyncSessionLocal() as session:
        app_settings = await get_or_create_settings(session)
        logger.info(f"Site settings ready (ID prefix '{app_settings.id_prefix}').")


async def seed_super_admin():
    if not settings.SUPER_ADMIN_EMAIL or not settings.SUPER_ADMIN_PASSWORD:
        logger.warning("Missing Super Admin credentials in settings.")
        return

    async with AsyncSessionLocal() as session:
        existing = await get_user_by_email(session, settings.SUPER_ADMIN_EMAIL)
        if existing:
            logger.info("Super Admin already exists. Skipping.")
            return

        logger.info(f"Seeding Super Admin: {settings.SUPER_ADMIN_EMAIL}")
        user = await create_super_admin(
            session,
            name=settings.SUPER_ADMIN_NAME or "Super Admin",
            email=settings.SUPER_ADMIN_EMAIL,
            password=settings.SUPER_ADMIN_PASSWORD,
        )
        logger.success(f"Super Admin created successfully ({user.user_id}).")


async def run_seeding():
    await seed_settings()
    await seed_super_admin()
