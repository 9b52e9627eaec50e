from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from config import ACCESS_TOKEN_SECRET, ALGORITHM, TOKEN_EXPIRE_DAYS
from errors import InvalidCredential


def issue_token(identity: dict, expires_delta: timedelta | None = None) -> str:
    """Crée le jeton de session. L'email est aussi recopié dans `sub`."""
    if not identity.get("email"):
        raise ValueError("identity must contain an email")
    to_encode = identity.copy()
    expire_time = datetime.now(timezone.utc) + (expires_delta or timedelta(days=TOKEN_EXPIRE_DAYS))
    to_encode.update({"sub": identity["email"], "exp": expire_time})
    return jwt.encode(to_encode, ACCESS_TOKEN_SECRET, algorithm=ALGORITHM)


def verify_token(token: str) -> dict:
    """Décode le jeton et retourne ses claims, ou lève InvalidCredential."""
    try:
        payload = jwt.decode(token, ACCESS_TOKEN_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        raise InvalidCredential()
    email = payload.get("email") or payload.get("sub")
    if not email:
        raise InvalidCredential()
    payload["email"] = email
    return payload
