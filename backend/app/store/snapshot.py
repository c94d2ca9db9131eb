"""
Loading of CSV table exports into an in-memory repository.

A snapshot directory holds ``profiles.csv``, ``items.csv`` and
``liked_items.csv``, plus an optional ``trades.csv``.
"""

import csv
import json
from pathlib import Path
from typing import Any, Dict, List, Type, TypeVar

import pandas as pd
import pydantic

from app.exceptions import ResourceNotFound, ValidationError
from app.models.schemas import Item, Like, Profile, Trade
from app.store.memory import InMemoryRepository
from app.utils.csv_validator import validate_frame
from app.utils.logger import get_logger

logger = get_logger(__name__)

M = TypeVar("M", bound=pydantic.BaseModel)

TABLES = {
    "profiles": (["id"], ["id"]),
    "items": (["id", "user_id", "name", "is_available"], ["id"]),
    "liked_items": (["user_id", "item_id", "created_at"], ["user_id", "item_id"]),
    "trades": (
        ["id", "proposer_id", "receiver_id", "offered_item_id", "requested_item_id", "status",
         "created_at", "updated_at"],
        ["id"],
    ),
}


def read_table(path: Path, name: str) -> List[Dict[str, Any]]:
    """Read and validate one exported table, returning rows with NaN as None."""
    required, keys = TABLES[name]
    try:
        # Everything as text; pydantic does the typing
        df = pd.read_csv(path, dtype=str)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ValidationError(f"Failed to parse {path.name}: {e}")

    result = validate_frame(df, required, keys)
    if not result["valid"]:
        raise ValidationError(
            f"{path.name} failed validation", details={"errors": result["errors"]}
        )
    for warning in result["warnings"]:
        logger.warning("%s: %s", path.name, warning)

    df = df.drop_duplicates(subset=keys, keep="last")
    df = df.astype(object).where(pd.notnull(df), None)
    return df.to_dict(orient="records")


def _parse_array(value: str) -> List[str]:
    """Parse a Postgres array literal (``{a,"b c"}``) or a JSON list."""
    text = value.strip()
    if text.startswith("["):
        return [str(v) for v in json.loads(text)]
    if text.startswith("{") and text.endswith("}"):
        text = text[1:-1]
    if not text:
        return []
    return [part for part in next(csv.reader([text], skipinitialspace=True)) if part]


def _clean(row: Dict[str, Any]) -> Dict[str, Any]:
    row = {k: v for k, v in row.items() if v is not None}
    if "media_files" in row:
        try:
            row["media_files"] = _parse_array(row["media_files"])
        except (ValueError, csv.Error) as e:
            raise ValidationError(f"Invalid media_files value {row['media_files']!r}: {e}")
    return row


def _build(model: Type[M], row: Dict[str, Any], source: str) -> M:
    try:
        return model.model_validate(_clean(row))
    except pydantic.ValidationError as e:
        errors = [f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()]
        raise ValidationError(f"{source} has an invalid row", details={"errors": errors}) from e


def load_snapshot(directory: str | Path) -> InMemoryRepository:
    """Build an InMemoryRepository from a snapshot directory.

    Likes that break the like invariant (own item, unknown item) are skipped
    with a warning.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise ValidationError(f"Snapshot directory not found: {directory}")

    repository = InMemoryRepository(
        profiles=[_build(Profile, r, "profiles.csv") for r in read_table(directory / "profiles.csv", "profiles")],
        items=[_build(Item, r, "items.csv") for r in read_table(directory / "items.csv", "items")],
    )

    skipped = 0
    for row in read_table(directory / "liked_items.csv", "liked_items"):
        like = _build(Like, row, "liked_items.csv")
        try:
            repository.add_like(like.user_id, like.item_id, created_at=like.created_at)
        except (ResourceNotFound, ValidationError) as e:
            logger.warning("Skipping like %s -> %s: %s", like.user_id, like.item_id, e.message)
            skipped += 1

    trades_path = directory / "trades.csv"
    if trades_path.exists():
        for row in read_table(trades_path, "trades"):
            repository.insert_trade(_build(Trade, row, "trades.csv"))

    logger.info("Loaded snapshot from %s (%d likes skipped)", directory, skipped)
    return repository
