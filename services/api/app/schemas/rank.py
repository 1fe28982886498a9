"""Rank entity and request payloads for /projects/{projectId}/items.

A Rank tracks the running average score of an item within a project.
Its primary key is derived: project_id + item_id, no separator.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


def derive_rank_id(project_id: str, item_id: str) -> str:
    """Derive the primary key of a rank.

    Example: ("p1", "i1") -> "p1i1"
    """
    return f"{project_id}{item_id}"


class Rank(BaseModel):
    """Running average score of an item scoped to a project."""

    id: str = ""
    project_id: str = Field(alias="projectId")
    item_id: str = Field(alias="itemId")
    total: int = Field(default=0, ge=0)
    average: float = 0.0
    # Bounds of the score scale (1-5, 0-20, 0-100...)
    min: float = 0.0
    max: float = 0.0
    created_at: datetime = Field(
        alias="createdAt",
        default_factory=lambda: datetime.now(timezone.utc),
    )
    deleted_at: datetime | None = Field(alias="deletedAt", default=None)

    model_config = {"populate_by_name": True}

    @classmethod
    def new_item(cls, project_id: str, item_id: str, min: float, max: float) -> "Rank":
        """Build a fresh item: no scores yet, id computed."""
        rank = cls(
            project_id=project_id,
            item_id=item_id,
            min=min,
            max=max,
            # average can be anything since total is 0
            average=0.0,
            total=0,
            created_at=datetime.now(timezone.utc),
        )
        rank.compute_id()
        return rank

    @property
    def computed_id(self) -> str:
        return derive_rank_id(self.project_id, self.item_id)

    def compute_id(self) -> None:
        self.id = self.computed_id

    def update_score(self, score: float) -> "Rank":
        """Fold a new score into the running average.

        average' = (average * total + score) / (total + 1)
        total'   = total + 1

        Scores outside [min, max] are accepted; see `accepts`.
        """
        self.average = (self.average * self.total + score) / (self.total + 1)
        self.total += 1
        return self

    def accepts(self, score: float) -> bool:
        """True if the score lies within the item's scale."""
        return self.min <= score <= self.max


class CreateItemRequest(BaseModel):
    """Request body for POST /projects/{projectId}/items."""

    item_id: str = Field(alias="itemId", min_length=1)
    min: float
    max: float

    model_config = {"populate_by_name": True}


class RankItemRequest(BaseModel):
    """Request body for POST /projects/{projectId}/items/{itemId}/rank."""

    score: float
