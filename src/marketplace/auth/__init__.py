"""Authentication and ownership authorization.

Learn: Four small pieces, leaf-first:
1. PasswordHasher → bcrypt hash/verify
2. TokenService → issue/verify signed 7-day session tokens (JWT)
3. get_current_user → FastAPI dependency gating protected routes
4. authorize_owner → per-item check before any mutation

Only the numeric user id travels from the guard to the handlers.
"""
