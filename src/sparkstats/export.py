"""
Export Functionality for SparkStats

Provides export formats for AI strategy metrics:
- pandas DataFrame summary table
- JSON (complete data, with a metadata header)
- CSV (summary table, one row per AI strategy)
"""

import json
import logging
from dataclasses import asdict, is_dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

import pandas as pd

from sparkstats import __version__
from sparkstats.analysis.models import AIStrategyMetrics

logger = logging.getLogger(__name__)

# Summary table columns: column name -> AIStrategyMetrics attribute
SUMMARY_COLUMNS = {
    "ai_strategy": "name",
    "type": "strategy_type",
    "matches": "total_matches",
    "usage_rate": "usage_rate",
    "win_rate": "win_rate",
    "combat_score": "combat_performance_score",
    "avg_damage_dealt": "avg_damage_dealt",
    "avg_damage_taken": "avg_damage_taken",
    "avg_dps": "avg_dps",
    "damage_efficiency": "damage_efficiency",
    "avg_survival_rate": "avg_survival_rate",
    "avg_battle_time": "avg_battle_time",
    "unique_characters": "unique_characters",
}


# ============================================================================
# Data Conversion Utilities
# ============================================================================


def dataclass_to_dict(obj: Any) -> Any:
    """Convert a dataclass (or nested dataclasses) to JSON-ready values."""
    if is_dataclass(obj) and not isinstance(obj, type) and hasattr(obj, "to_dict"):
        # Result types decide their own shape (AIStrategyMetrics drops raw accumulators)
        return dataclass_to_dict(obj.to_dict())
    if is_dataclass(obj) and not isinstance(obj, type):
        return {key: dataclass_to_dict(value) for key, value in asdict(obj).items()}
    elif isinstance(obj, dict):
        return {k: dataclass_to_dict(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [dataclass_to_dict(item) for item in obj]
    elif isinstance(obj, Enum):
        return obj.value
    elif isinstance(obj, Path):
        return str(obj)
    else:
        return obj


def metrics_to_dataframe(metrics: dict[str, AIStrategyMetrics]) -> pd.DataFrame:
    """
    Build a one-row-per-AI summary table.

    Args:
        metrics: Output of compute_ai_strategy_metrics (or a filtered view)

    Returns:
        DataFrame with the SUMMARY_COLUMNS, in the mapping's order
    """
    columns = list(SUMMARY_COLUMNS)
    if any(ai.character_filtered for ai in metrics.values()):
        columns.append("character")

    rows = []
    for ai in metrics.values():
        row = {}
        for column, attr in SUMMARY_COLUMNS.items():
            value = getattr(ai, attr)
            row[column] = value.value if isinstance(value, Enum) else value
        if ai.character_filtered:
            row["character"] = ai.character_name
        rows.append(row)

    return pd.DataFrame(rows, columns=columns)


# ============================================================================
# JSON Export
# ============================================================================


def export_to_json(
    data: Any,
    output_path: Path | None = None,
    indent: int = 2,
    include_metadata: bool = True,
) -> str:
    """
    Export metrics or insights to JSON format.

    Args:
        data: Metrics mapping, insight package, or any nesting of dataclasses
        output_path: Optional path to write the file
        indent: JSON indentation level
        include_metadata: Whether to include export metadata

    Returns:
        JSON string
    """
    export_data = dataclass_to_dict(data)

    if include_metadata:
        export_data = {
            "_metadata": {
                "exported_at": datetime.now().isoformat(),
                "format": "sparkstats_json",
                "version": __version__,
            },
            "data": export_data,
        }

    json_str = json.dumps(export_data, indent=indent, default=str, ensure_ascii=False)

    if output_path:
        output_path.write_text(json_str, encoding="utf-8")
        logger.info(f"Exported JSON to: {output_path}")

    return json_str


# ============================================================================
# CSV Export
# ============================================================================


def export_metrics_to_csv(
    metrics: dict[str, AIStrategyMetrics],
    output_path: Path | None = None,
    delimiter: str = ",",
) -> str:
    """
    Export the AI strategy summary table to CSV.

    Returns:
        CSV string (empty when there are no metrics)
    """
    if not metrics:
        return ""

    csv_str = metrics_to_dataframe(metrics).to_csv(index=False, sep=delimiter)

    if output_path:
        output_path.write_text(csv_str, encoding="utf-8")
        logger.info(f"Exported CSV to: {output_path}")

    return csv_str


def export_metrics(
    metrics: dict[str, AIStrategyMetrics],
    output_path: Path,
    json_indent: int = 2,
    csv_delimiter: str = ",",
) -> str:
    """Export to the format implied by the output file extension."""
    suffix = output_path.suffix.lower()
    if suffix == ".csv":
        return export_metrics_to_csv(metrics, output_path, delimiter=csv_delimiter)
    if suffix == ".json":
        return export_to_json(metrics, output_path, indent=json_indent)
    raise ValueError(f"Unsupported export format: {suffix}")
