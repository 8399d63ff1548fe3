from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

from bookverse_api.domain import UserId

# identity arrives from the upstream auth gateway as a verified user id
user_id_header = APIKeyHeader(name="X-User-Id", auto_error=False)


def _parse_user_id(raw: str) -> UserId:
    value = raw.strip()
    if not value.isdigit() or int(value) <= 0:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid X-User-Id header",
        )
    return UserId(int(value))


def get_current_user_id(
    api_key: Annotated[str | None, Depends(user_id_header)] = None,
) -> UserId:
    if not api_key or not api_key.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or empty X-User-Id header",
        )
    return _parse_user_id(api_key)


def get_optional_user_id(
    api_key: Annotated[str | None, Depends(user_id_header)] = None,
) -> UserId | None:
    if not api_key or not api_key.strip():
        return None
    return _parse_user_id(api_key)
