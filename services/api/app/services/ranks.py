"""Rank service: items of a project and their running average score.

Flow for a score submission:
1. Derive the rank id from (project_id, item_id)
2. Let the repository apply the update atomically, checking the score
   against the item's [min, max] in the same unit when asked to

Scores outside the item's scale are accepted unless enforce_bounds is set.
"""

import logging

from app.repositories import RankRepository
from app.schemas import Rank, derive_rank_id
from app.services.metrics import SCORES_SUBMITTED

logger = logging.getLogger("uvicorn.error")


async def create_item(
    repo: RankRepository,
    *,
    project_id: str,
    item_id: str,
    min: float,
    max: float,
) -> Rank:
    """Create (or reset) an item with no scores.

    Saving is an upsert, so creating an existing item starts it over.

    Returns:
        The stored Rank.
    """
    rank = Rank.new_item(project_id, item_id, min, max)
    await repo.save(rank)
    logger.info(f"Item created: {rank.id} (scale {min}-{max})")
    return rank


async def get_item(repo: RankRepository, *, project_id: str, item_id: str) -> Rank | None:
    """Get an item by its project and item ids, None if it does not exist."""
    return await repo.get(derive_rank_id(project_id, item_id))


async def rank_item(
    repo: RankRepository,
    *,
    project_id: str,
    item_id: str,
    score: float,
    enforce_bounds: bool = False,
) -> Rank | None:
    """Submit a score for an item.

    Args:
        repo: Rank repository.
        project_id: Project the item belongs to.
        item_id: Item identifier within the project.
        score: Submitted score.
        enforce_bounds: Reject scores outside the item's [min, max].

    Returns:
        The updated Rank, or None if the item does not exist.

    Raises:
        ScoreOutOfRangeError: If enforce_bounds is set and the score is out of range.
    """
    rank_id = derive_rank_id(project_id, item_id)
    rank = await repo.rank(rank_id, score, enforce_bounds=enforce_bounds)
    if rank is not None:
        SCORES_SUBMITTED.inc()
    return rank
