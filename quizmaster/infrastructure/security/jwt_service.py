from datetime import datetime, timedelta, timezone

import jwt


def create_access_token(
    user_id: int,
    role: str,
    *,
    secret: str,
    algorithm: str = "HS256",
    ttl_minutes: int = 120,
) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=ttl_minutes)).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_access_token(token: str, *, secret: str, algorithm: str = "HS256") -> dict:
    """Raises jwt.PyJWTError on a bad signature, expiry or malformed token."""
    payload = jwt.decode(token, secret, algorithms=[algorithm])
    return {"user_id": int(payload["sub"]), "role": payload.get("role")}
