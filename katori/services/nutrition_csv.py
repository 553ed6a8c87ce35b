"""Convert the nutrition source CSV into the ``nutrition-db.json`` reference table."""
import csv
import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# JSON nutrient field -> CSV column
NUTRIENT_COLUMNS = {
    "energy_kj": "energy_kj",
    "energy_kcal": "energy_kcal",
    "carb_g": "carb_g",
    "protein_g": "protein_g",
    "fat_g": "fat_g",
    "free_sugar_g": "freesugar_g",
    "fibre_g": "fibre_g",
}


def _to_float(value: str | None) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def convert_nutrition_csv(csv_path: str | Path) -> list[dict[str, Any]]:
    """Read the nutrition source CSV into nutrition-db records.

    Blank or non-numeric nutrient cells are stored as 0.
    """
    csv_path = Path(csv_path)
    records = []
    with csv_path.open(encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f, skipinitialspace=True)
        for row in reader:
            row = {k.strip(): (v or "").strip() for k, v in row.items() if k is not None}
            if not any(row.values()):
                continue
            records.append({
                "food_code": row.get("food_code"),
                "food_name": row.get("food_name"),
                "food_group": row.get("Primary food group"),
                "nutrition": {
                    field: _to_float(row.get(column))
                    for field, column in NUTRIENT_COLUMNS.items()
                },
            })

    logger.info(f"Read {len(records)} nutrition records from {csv_path.name}")
    return records


def write_nutrition_db(records: list[dict[str, Any]], output_path: str | Path) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info(f"Wrote {len(records)} records to {output_path}")
    return output_path
