"""Auth API — registration, login, current user.

Learn: Routes for user authentication:
- POST /register → create an account, returns a session token
- POST /login → email/password → session token
- GET /me → current user's public profile (requires a token)
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.auth.dependencies import CurrentIdentity, get_current_user
from marketplace.db.engine import get_db
from marketplace.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserRead,
)
from marketplace.services.auth_service import AuthService
from marketplace.stores.sql import SqlCredentialStore

router = APIRouter()


def _svc(request: Request, db: AsyncSession = Depends(get_db)) -> AuthService:
    ctx = request.app.state.ctx
    return AuthService(SqlCredentialStore(db), ctx.hasher, ctx.tokens)


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(body: RegisterRequest, svc: AuthService = Depends(_svc)):
    """Create a new user account and log it in."""
    token = await svc.register(
        email=body.email, name=body.name, password=body.password, phone=body.phone
    )
    return TokenResponse(token=token)


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, svc: AuthService = Depends(_svc)):
    """Login with email and password → session token."""
    token = await svc.login(email=body.email, password=body.password)
    return TokenResponse(token=token)


@router.get("/me", response_model=UserRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: AuthService = Depends(_svc),
):
    """Get the current authenticated user's info."""
    return await svc.me(identity.user_id)
