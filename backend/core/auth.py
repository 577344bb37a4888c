import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from core.config import supabase_jwt_secret

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    id: str
    email: str | None = None


def decode_access_token(token: str) -> CurrentUser:
    """Verify a Supabase-issued access token and return its subject."""
    payload = jwt.decode(
        token,
        supabase_jwt_secret(),
        algorithms=[JWT_ALGORITHM],
        options={"verify_aud": False},
    )
    subject = payload.get("sub")
    if not subject:
        raise JWTError("Token has no subject")
    return CurrentUser(id=str(subject), email=payload.get("email"))


async def get_current_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> CurrentUser:
    if cred is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")

    try:
        return decode_access_token(cred.credentials)
    except JWTError as e:
        logger.info("Rejected bearer token: %s", e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
