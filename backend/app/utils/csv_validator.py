"""
CSV validation utilities for snapshot exports.
"""

import pandas as pd
from typing import Dict, List, Any


def validate_frame(
    df: pd.DataFrame, required_columns: List[str], key_columns: List[str]
) -> Dict[str, Any]:
    """Validate an exported table against its required and key columns."""
    errors: List[str] = []
    warnings: List[str] = []

    missing_columns = [col for col in required_columns if col not in df.columns]
    if missing_columns:
        errors.append(f"Missing required columns: {', '.join(missing_columns)}")
        return {
            "valid": False,
            "errors": errors,
            "warnings": warnings,
            "row_count": 0,
        }

    row_count = len(df)

    for col in key_columns:
        null_count = df[col].isnull().sum()
        if null_count > 0:
            errors.append(f"Column '{col}' contains {null_count} null values")

    duplicate_keys = df.duplicated(subset=key_columns).sum()
    if duplicate_keys > 0:
        warnings.append(
            f"Found {duplicate_keys} duplicate {'/'.join(key_columns)} values"
        )

    if "created_at" in df.columns:
        try:
            pd.to_datetime(df["created_at"].dropna(), utc=True, format="ISO8601")
        except (ValueError, TypeError):
            errors.append("Column 'created_at' could not be parsed as datetime")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
        "row_count": row_count,
    }
