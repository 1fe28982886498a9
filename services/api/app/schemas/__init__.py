"""Pydantic schemas for entities and API request/response validation."""

from app.schemas.common import ErrorDetail, ErrorResponse, error_content
from app.schemas.rank import CreateItemRequest, Rank, RankItemRequest, derive_rank_id
from app.schemas.user import CreateUserRequest, User, generate_user_id

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "error_content",
    "CreateItemRequest",
    "Rank",
    "RankItemRequest",
    "derive_rank_id",
    "CreateUserRequest",
    "User",
    "generate_user_id",
]
