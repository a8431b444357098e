# portal/core/security.py

import jwt  # PyJWT

ALGORITHM = "HS256"
SUPABASE_AUDIENCE = "authenticated"


def decode_access_token(token: str, secret: str) -> dict:
    """
    Verify a Supabase-issued access token and return its claims.

    Raises jwt.ExpiredSignatureError / jwt.InvalidTokenError; callers map
    those onto a 401.
    """
    return jwt.decode(
        token,
        secret,
        algorithms=[ALGORITHM],
        audience=SUPABASE_AUDIENCE,
        options={"verify_exp": True, "require": ["sub", "exp"]},
    )
