"""User Route — deprecated cookie-authenticated account lookup.

Invariants:
    - GET /user answers 200 with the public record, or null when the `token`
      cookie is missing, unknown or expired; it never answers 401
"""

from fastapi import APIRouter, Depends

from uden.api.dependencies import get_cookie_user
from uden.models.user import User
from uden.schemas.user import UserResponse

router = APIRouter(prefix="/user", tags=["user"])


@router.get("", response_model=UserResponse | None, deprecated=True)
async def get_user(user: User | None = Depends(get_cookie_user)):
    if user is None:
        return None
    return UserResponse.from_user(user)
