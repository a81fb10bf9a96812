"""Auth service — registration, login and the current user.

Learn: Service layer separates business logic from HTTP routing.
API routes build the service with a credential store, the password
hasher and the token service; the service raises AppError subclasses
and never touches HTTP. bcrypt is CPU-bound, so hashing and verifying
run in the thread pool instead of blocking the event loop.
"""

import structlog
from starlette.concurrency import run_in_threadpool

from marketplace.auth.password import PasswordHasher
from marketplace.auth.tokens import TokenService
from marketplace.errors import ConflictError, NotFoundError, UnauthorizedError
from marketplace.records import Identity
from marketplace.stores.base import CredentialStore

logger = structlog.get_logger()

WRONG_CREDENTIALS = "Wrong email or password"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    """Business logic for accounts and sessions."""

    def __init__(
        self,
        credentials: CredentialStore,
        hasher: PasswordHasher,
        tokens: TokenService,
    ):
        self.credentials = credentials
        self.hasher = hasher
        self.tokens = tokens

    async def register(
        self, email: str, name: str, password: str, phone: str = ""
    ) -> str:
        """Create an account and return a session token for it."""
        email = normalize_email(email)
        if await self.credentials.find_by_email(email):
            raise ConflictError("User already exists", field="email")

        password_hash = await run_in_threadpool(self.hasher.hash, password)
        user = await self.credentials.create(
            email=email, name=name, phone=phone, password_hash=password_hash
        )
        logger.info("auth.registered", user_id=user.id)
        return self.tokens.issue(user.id)

    async def login(self, email: str, password: str) -> str:
        """Check credentials and return a fresh session token."""
        user = await self.credentials.find_by_email(normalize_email(email))
        if not user:
            logger.info("auth.login_failed", reason="unknown_email")
            raise UnauthorizedError(WRONG_CREDENTIALS, field="email")

        matches = await run_in_threadpool(
            self.hasher.verify, password, user.password_hash
        )
        if not matches:
            logger.info("auth.login_failed", reason="wrong_password", user_id=user.id)
            raise UnauthorizedError(WRONG_CREDENTIALS, field="password")

        logger.info("auth.logged_in", user_id=user.id)
        return self.tokens.issue(user.id)

    async def me(self, user_id: int) -> Identity:
        user = await self.credentials.find_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user
