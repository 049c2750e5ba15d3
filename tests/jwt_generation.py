from datetime import datetime, timedelta, timezone

import jwt

from marketplace_chat.config.settings import Config


def generate_jwt_token(user_id: str, expires_in: timedelta = timedelta(hours=1), **claims) -> str:
    """Generate a valid JWT token for testing API endpoints"""
    payload = {
        "sub": user_id,
        "exp": datetime.now(timezone.utc) + expires_in,
        "iat": datetime.now(timezone.utc),
        "iss": Config.SERVICE_AUTH_ISSUER,
        "aud": Config.SERVICE_AUTH_AUDIENCE,
    }
    payload.update(claims)

    token = jwt.encode(payload, Config.SERVICE_AUTH_SECRET, algorithm="HS256")
    return token


def auth_headers_for(user_id) -> dict:
    return {"Authorization": f"Bearer {generate_jwt_token(str(user_id))}"}
