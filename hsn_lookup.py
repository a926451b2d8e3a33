import os
from typing import Dict, List, Optional

import pandas as pd  # type: ignore
from loguru import logger
from rapidfuzz import process, fuzz  # type: ignore

from utils import normalize_columns

_HSN_ALIASES = {
    "hsn": "hsn_code",
    "hsn_sac": "hsn_code",
    "gst_rate": "rate",
    "gst": "rate",
}


class HSNLookup:
    def __init__(self, csv_path: str, min_score: float = 60.0):
        """Load an HSN reference table (columns: hsn_code, description, rate)."""
        self.df = normalize_columns(pd.read_csv(csv_path, dtype=str), _HSN_ALIASES)
        for col in ("hsn_code", "description", "rate"):
            if col not in self.df.columns:
                raise ValueError(f"HSN table {csv_path} must have a {col} column")
        self.df = self.df.dropna(subset=["description"]).reset_index(drop=True)
        self.min_score = min_score

    def __len__(self):
        return len(self.df)

    def suggest(self, description: str, limit: int = 1) -> List[Dict]:
        """Closest HSN entries for a free-text item name, best first."""
        if not description or not description.strip():
            return []
        choices = self.df["description"].tolist()
        matches = process.extract(
            description, choices, scorer=fuzz.WRatio, limit=limit, score_cutoff=self.min_score
        )
        results = []
        for match, score, idx in matches:
            row = self.df.iloc[idx]
            results.append({
                "hsn_code": str(row["hsn_code"]).strip(),
                "description": match,
                "rate": float(row["rate"]),
                "score": score,
            })
        return results


def load_hsn_lookup(csv_path: str) -> Optional[HSNLookup]:
    """HSN suggestions are optional; a missing or broken table disables them."""
    if not csv_path or not os.path.exists(csv_path):
        logger.warning("HSN table {} not found, HSN suggestions disabled", csv_path)
        return None
    try:
        lookup = HSNLookup(csv_path)
    except (OSError, ValueError) as e:
        logger.warning("Could not load HSN table {}: {}", csv_path, e)
        return None
    logger.info("Loaded {} HSN entries from {}", len(lookup), csv_path)
    return lookup
