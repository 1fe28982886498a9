"""User endpoints.

POST /users           - create a user
GET  /users/{userId}  - read a user
"""

from fastapi import APIRouter, Depends, HTTPException, Path

from app.repositories import UserRepository
from app.routes.deps import get_user_repository
from app.schemas import CreateUserRequest, ErrorResponse, User, error_content
from app.services.metrics import REQUESTS
from app.services.users import create_user, get_user

router = APIRouter()


@router.post("", response_model=User, status_code=201)
async def post_user(
    payload: CreateUserRequest,
    repo: UserRepository = Depends(get_user_repository),
) -> User:
    REQUESTS.labels("create_user").inc()
    return await create_user(repo, username=payload.username)


@router.get(
    "/{userId}",
    response_model=User,
    responses={404: {"model": ErrorResponse}},
)
async def read_user(
    user_id: str = Path(alias="userId", min_length=1),
    repo: UserRepository = Depends(get_user_repository),
) -> User:
    REQUESTS.labels("get_user").inc()
    user = await get_user(repo, user_id=user_id)
    if user is None:
        raise HTTPException(
            status_code=404,
            detail=error_content(
                "USER_NOT_FOUND",
                f"User {user_id} not found",
                {"user_id": user_id},
            ),
        )
    return user
