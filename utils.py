import io
from typing import List, Dict

import pandas as pd  # type: ignore
from loguru import logger

from models import InventoryItem

_COLUMN_ALIASES = {
    "description": "name",
    "item": "name",
    "hsn_code": "hsn",
    "unit_price": "rate",
    "price": "rate",
    "qty": "stock",
    "quantity": "stock",
    "gst": "gst_rate",
    "gst%": "gst_rate",
}


def normalize_columns(df: pd.DataFrame, aliases=None) -> pd.DataFrame:
    """Lower-case, underscore and alias column names so uploads with loose headers still load."""
    aliases = _COLUMN_ALIASES if aliases is None else aliases
    cols = {}
    for c in df.columns:
        key = str(c).strip().lower().replace(" ", "_")
        cols[c] = aliases.get(key, key)
    return df.rename(columns=cols)


def cell_text(row, key, default="") -> str:
    val = row.get(key, default)
    if val is None or (not isinstance(val, str) and pd.isna(val)):
        return default
    # codes like HSN 7214 come back as 7214.0 when the column has gaps
    if isinstance(val, float) and val.is_integer():
        val = int(val)
    return str(val).strip()


def cell_number(row, key, default=0.0) -> float:
    val = row.get(key, default)
    if val is None or (not isinstance(val, str) and pd.isna(val)):
        return default
    return float(val)


def items_from_dataframe(df: pd.DataFrame, hsn_lookup=None) -> List[InventoryItem]:
    """
    Convert a catalog sheet into inventory items. Needs at least name and rate
    columns; with an `hsn_lookup`, blank HSN codes and GST rates are suggested.
    """
    df = normalize_columns(df)
    records = []
    for idx, row in df.iterrows():
        try:
            name = cell_text(row, "name")
            rate = cell_number(row, "rate", None)
            if not name or rate is None:
                raise ValueError("name and rate are required")
            records.append({
                "id": cell_text(row, "id") or str(idx + 1),
                "name": name,
                "hsn": cell_text(row, "hsn"),
                "rate": rate,
                "stock": int(cell_number(row, "stock", 0)),
                "unit": cell_text(row, "unit") or "Pcs",
                "gst_rate": cell_number(row, "gst_rate", None),
            })
        except (TypeError, ValueError) as e:
            logger.warning("Skipping inventory row {}: {}", idx, e)
            continue

    if hsn_lookup is not None:
        records = normalize_item_dicts(records, hsn_lookup)
    return [InventoryItem(**{**r, "gst_rate": float(r["gst_rate"] or 0.0)}) for r in records]


def read_inventory_file(file_bytes: bytes, filename: str, hsn_lookup=None) -> List[InventoryItem]:
    fname = filename.lower()
    try:
        if fname.endswith(".csv"):
            df = pd.read_csv(io.BytesIO(file_bytes))
        elif fname.endswith(".xlsx"):
            df = pd.read_excel(io.BytesIO(file_bytes))
        else:
            logger.warning("Unsupported inventory file type: {}", filename)
            return []
    except (OSError, ValueError) as e:
        logger.error("Could not read {}: {}", filename, e)
        return []
    return items_from_dataframe(df, hsn_lookup)


def normalize_item_dicts(items: List[Dict], hsn_lookup) -> List[Dict]:
    """Fill in missing HSN code and GST rate from the closest HSN table match."""
    normalized = []
    for it in items:
        desc = it.get("name", "")
        hsn_code = it.get("hsn") or ""
        gst_rate = it.get("gst_rate")
        if desc and (not hsn_code or gst_rate is None):
            sugg = hsn_lookup.suggest(desc, limit=1)
            if sugg:
                hsn_code = hsn_code or sugg[0]["hsn_code"]
                gst_rate = sugg[0]["rate"] if gst_rate is None else gst_rate
        normalized.append({
            **it,
            "name": desc,
            "hsn": str(hsn_code),
            "gst_rate": float(gst_rate or 0.0),
        })
    return normalized
