"""Unit tests for the Rank entity (no storage)."""

import pytest

from app.schemas import Rank, derive_rank_id


def test_derive_rank_id_concatenates_without_separator() -> None:
    assert derive_rank_id("p1", "i1") == "p1i1"
    assert derive_rank_id("p1", "i1") == derive_rank_id("p1", "i1")


def test_compute_id_follows_project_and_item() -> None:
    rank = Rank(project_id="p1", item_id="i1")
    assert rank.id == ""

    rank.compute_id()
    assert rank.id == "p1i1"

    rank.item_id = "i2"
    assert rank.computed_id == "p1i2"
    rank.compute_id()
    assert rank.id == "p1i2"


def test_new_item_starts_empty() -> None:
    rank = Rank.new_item("proj", "item", 1.0, 5.0)
    assert rank.id == "projitem"
    assert rank.total == 0
    assert rank.average == 0.0
    assert (rank.min, rank.max) == (1.0, 5.0)
    assert rank.created_at.tzinfo is not None
    assert rank.deleted_at is None


def test_first_score_discards_prior_average() -> None:
    rank = Rank(project_id="p", item_id="i", average=42.0, total=0)
    rank.update_score(8.0)
    assert rank.average == 8.0
    assert rank.total == 1


def test_score_sequence_averages() -> None:
    rank = Rank.new_item("p", "i", 0.0, 10.0)
    for score in [2.0, 4.0, 6.0]:
        rank.update_score(score)
    assert rank.average == pytest.approx(4.0)
    assert rank.total == 3


def test_update_score_accepts_out_of_range_scores() -> None:
    rank = Rank.new_item("p", "i", 1.0, 5.0)
    rank.update_score(100.0)
    assert rank.average == 100.0
    assert rank.total == 1


def test_accepts_is_inclusive() -> None:
    rank = Rank.new_item("p", "i", 1.0, 5.0)
    assert rank.accepts(1.0)
    assert rank.accepts(5.0)
    assert not rank.accepts(0.99)
    assert not rank.accepts(5.01)


def test_serializes_with_camel_case_fields() -> None:
    rank = Rank.new_item("p", "i", 0.0, 20.0)
    data = rank.model_dump(mode="json", by_alias=True)
    assert set(data) == {
        "id",
        "projectId",
        "itemId",
        "total",
        "average",
        "min",
        "max",
        "createdAt",
        "deletedAt",
    }
    assert Rank.model_validate(data) == rank
