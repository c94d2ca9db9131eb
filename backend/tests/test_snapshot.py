"""
Tests for loading CSV snapshots.
"""

from pathlib import Path

import pandas as pd
import pytest

from app.exceptions import ValidationError
from app.services.trade_finder import TradeCycleFinder
from app.store.snapshot import load_snapshot


def write_snapshot(directory: Path, likes=None, items=None) -> Path:
    pd.DataFrame(
        {
            "id": ["A", "B", "C"],
            "name": ["Alice", "Bob", None],
            "avatar_url": ["https://cdn.example.com/a.png", None, None],
        }
    ).to_csv(directory / "profiles.csv", index=False)
    pd.DataFrame(
        items
        or {
            "id": ["item1", "item2", "item3"],
            "user_id": ["A", "B", "C"],
            "name": ["Guitar", "Bike", "Camera"],
            "image_url": [None, "https://cdn.example.com/bike.jpg", None],
            "is_available": [True, True, True],
        }
    ).to_csv(directory / "items.csv", index=False)
    pd.DataFrame(
        likes
        or {
            "user_id": ["B", "C", "A"],
            "item_id": ["item1", "item2", "item3"],
            "created_at": ["2026-01-01T10:00:00Z", "2026-01-01T11:00:00Z", "2026-01-01T12:00:00Z"],
        }
    ).to_csv(directory / "liked_items.csv", index=False)
    return directory


def test_snapshot_serves_suggestions(tmp_path: Path):
    repo = load_snapshot(write_snapshot(tmp_path))

    suggestions = TradeCycleFinder(repo).find("A").suggestions

    assert len(suggestions) == 1
    assert suggestions[0].user_c_name is None
    assert suggestions[0].item_b_image == "https://cdn.example.com/bike.jpg"
    assert suggestions[0].item_a_name == "Guitar"


def test_snapshot_keeps_numeric_looking_ids_as_text(tmp_path: Path):
    items = {
        "id": ["001", "002"],
        "user_id": ["A", "B"],
        "name": ["Guitar", "Bike"],
        "is_available": ["true", "false"],
    }
    likes = {"user_id": ["B"], "item_id": ["001"], "created_at": ["2026-01-01T10:00:00Z"]}

    repo = load_snapshot(write_snapshot(tmp_path, likes=likes, items=items))

    assert [i.id for i in repo.available_items_owned_by("A")] == ["001"]
    assert repo.available_items_owned_by("B") == []
    assert [l.user_id for l in repo.likers_of("001")] == ["B"]


def test_snapshot_skips_invalid_likes(tmp_path: Path):
    likes = {
        "user_id": ["A", "B", "B"],
        "item_id": ["item1", "missing", "item1"],
        "created_at": ["2026-01-01T10:00:00Z"] * 3,
    }

    repo = load_snapshot(write_snapshot(tmp_path, likes=likes))

    assert [l.user_id for l in repo.likers_of("item1")] == ["B"]


def test_snapshot_missing_columns(tmp_path: Path):
    write_snapshot(tmp_path)
    pd.DataFrame({"id": ["item1"]}).to_csv(tmp_path / "items.csv", index=False)

    with pytest.raises(ValidationError) as excinfo:
        load_snapshot(tmp_path)
    assert "Missing required columns" in excinfo.value.details["errors"][0]


def test_snapshot_missing_directory(tmp_path: Path):
    with pytest.raises(ValidationError):
        load_snapshot(tmp_path / "nope")


def test_snapshot_parses_media_files_arrays(tmp_path: Path):
    items = {
        "id": ["item1", "item2", "item3"],
        "user_id": ["A", "B", "C"],
        "name": ["Guitar", "Bike", "Camera"],
        "media_files": ['{https://cdn.example.com/g1.jpg,"https://cdn.example.com/g 2.jpg"}', "{}", None],
        "is_available": [True, True, True],
    }

    repo = load_snapshot(write_snapshot(tmp_path, items=items))

    guitar, = repo.available_items_owned_by("A")
    assert guitar.media_files == ["https://cdn.example.com/g1.jpg", "https://cdn.example.com/g 2.jpg"]
    assert guitar.primary_image == "https://cdn.example.com/g1.jpg"
    assert repo.available_items_owned_by("B")[0].media_files == []
    assert repo.available_items_owned_by("C")[0].media_files == []


def test_snapshot_bad_row_is_validation_error(tmp_path: Path):
    items = {
        "id": ["item1"],
        "user_id": ["A"],
        "name": ["Guitar"],
        "is_available": ["sometimes"],
    }

    with pytest.raises(ValidationError) as excinfo:
        load_snapshot(write_snapshot(tmp_path, items=items))
    assert "is_available" in excinfo.value.details["errors"][0]
