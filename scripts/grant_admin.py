"""Grant admin rights (and optionally long-lived premium) to an existing viewer.

Out-of-band replacement for sharing a bypass code: run by an operator
with database access.

Usage:
    python -m scripts.grant_admin someone@example.com
    python -m scripts.grant_admin someone@example.com --premium --yes

The viewer must have signed in at least once so their record exists.
"""

from __future__ import annotations

import asyncio
import logging
import sys

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(message)s")
logger = logging.getLogger(__name__)


async def grant_admin(email: str, with_premium: bool) -> int:
    """Returns a process exit code."""
    from app.config.settings import settings
    from app.domain.entitlement_operations import entitlement_ops
    from app.domain.user_operations import user_ops

    engine = create_async_engine(settings.database_url_direct, echo=False)
    async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    try:
        async with async_session() as db:
            user = await user_ops.get_by_email(db, email.lower())
            if not user:
                logger.error(f"No viewer with email {email}. They must sign in first.")
                return 1

            action = "admin + premium" if with_premium else "admin"
            logger.info(f"Granting {action} to {user.email} ({user.id})")

            if "--yes" not in sys.argv:
                confirm = input("Continue? [y/N] ")
                if confirm.lower() != "y":
                    logger.info("Aborted.")
                    return 1

            if with_premium:
                await entitlement_ops.apply_override(db, user)
            else:
                await entitlement_ops.grant_admin(db, user)
            await db.commit()
            logger.info("Done.")
            return 0
    finally:
        await engine.dispose()


if __name__ == "__main__":
    args = [arg for arg in sys.argv[1:] if not arg.startswith("--")]
    if len(args) != 1:
        print(__doc__)
        sys.exit(2)
    sys.exit(asyncio.run(grant_admin(args[0], "--premium" in sys.argv)))
