"""Item endpoints (ranks scoped to a project).

POST /projects/{projectId}/items                 - create an item
GET  /projects/{projectId}/items/{itemId}        - read an item
POST /projects/{projectId}/items/{itemId}/rank   - submit a score

Routers are thin: call services for business logic.
"""

from fastapi import APIRouter, Depends, HTTPException, Path

from app.errors import ScoreOutOfRangeError
from app.repositories import RankRepository
from app.routes.deps import get_app_settings, get_rank_repository
from app.schemas import CreateItemRequest, ErrorResponse, Rank, RankItemRequest, error_content
from app.services.metrics import REQUESTS
from app.services.ranks import create_item, get_item, rank_item
from app.settings import Settings

router = APIRouter()


def _item_not_found(project_id: str, item_id: str) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail=error_content(
            "ITEM_NOT_FOUND",
            f"Item {item_id} not found in project {project_id}",
            {"project_id": project_id, "item_id": item_id},
        ),
    )


@router.post(
    "/{projectId}/items",
    response_model=Rank,
    status_code=201,
)
async def post_item(
    payload: CreateItemRequest,
    project_id: str = Path(alias="projectId", min_length=1),
    repo: RankRepository = Depends(get_rank_repository),
) -> Rank:
    """Create an item with no scores yet (average 0, total 0)."""
    REQUESTS.labels("create_item").inc()
    return await create_item(
        repo,
        project_id=project_id,
        item_id=payload.item_id,
        min=payload.min,
        max=payload.max,
    )


@router.get(
    "/{projectId}/items/{itemId}",
    response_model=Rank,
    responses={404: {"model": ErrorResponse}},
)
async def read_item(
    project_id: str = Path(alias="projectId", min_length=1),
    item_id: str = Path(alias="itemId", min_length=1),
    repo: RankRepository = Depends(get_rank_repository),
) -> Rank:
    """Get an item with its current average and number of scores."""
    REQUESTS.labels("get_item").inc()
    rank = await get_item(repo, project_id=project_id, item_id=item_id)
    if rank is None:
        raise _item_not_found(project_id, item_id)
    return rank


@router.post(
    "/{projectId}/items/{itemId}/rank",
    response_model=Rank,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def post_rank(
    payload: RankItemRequest,
    project_id: str = Path(alias="projectId", min_length=1),
    item_id: str = Path(alias="itemId", min_length=1),
    repo: RankRepository = Depends(get_rank_repository),
    settings: Settings = Depends(get_app_settings),
) -> Rank:
    """Submit a score and return the item with its updated average.

    Raises:
        HTTPException 404: If the item does not exist.
        HTTPException 422: If bounds are enforced and the score is out of range.
    """
    REQUESTS.labels("rank_item").inc()
    try:
        rank = await rank_item(
            repo,
            project_id=project_id,
            item_id=item_id,
            score=payload.score,
            enforce_bounds=settings.enforce_score_bounds,
        )
    except ScoreOutOfRangeError as e:
        raise HTTPException(
            status_code=422,
            detail=error_content(
                "SCORE_OUT_OF_RANGE",
                str(e),
                {"score": e.score, "min": e.min, "max": e.max},
            ),
        )

    if rank is None:
        raise _item_not_found(project_id, item_id)
    return rank
