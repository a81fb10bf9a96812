"""Application context — the process-wide collaborators.

Learn: Instead of module-level singletons (engine, signing secret, Redis
pool), everything long-lived is built once from Settings into an
AppContext and stored on app.state.ctx. Dependencies read it from the
request. Tests build their own context with an in-memory database,
a temp upload dir, or a TokenService with a frozen clock.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional

import redis.asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from marketplace.auth.password import PasswordHasher
from marketplace.auth.tokens import TokenService
from marketplace.config import Settings
from marketplace.db.engine import build_engine, build_session_factory
from marketplace.storage import ImageStorage


@dataclass
class AppContext:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    hasher: PasswordHasher
    tokens: TokenService
    images: ImageStorage
    # Connected in the lifespan; None means rate limiting is off
    redis: Optional[aioredis.Redis] = field(default=None)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        engine = build_engine(settings)
        return cls(
            settings=settings,
            engine=engine,
            session_factory=build_session_factory(engine),
            hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
            tokens=TokenService(
                secret=settings.jwt_secret,
                algorithm=settings.jwt_algorithm,
                lifetime=timedelta(days=settings.token_lifetime_days),
            ),
            images=ImageStorage(settings.upload_dir),
        )

    async def connect_redis(self) -> aioredis.Redis:
        """Open the Redis pool and verify it answers."""
        client = aioredis.from_url(
            self.settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        try:
            await client.ping()
        except Exception:
            await client.aclose()
            raise
        self.redis = client
        return client

    async def close(self) -> None:
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
        await self.engine.dispose()
