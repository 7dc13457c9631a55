import logging
import os
import uuid
from typing import Dict, Iterable, List, Optional

import pandas as pd
from pydantic import ValidationError

from .config import get_csv_file_path
from .models import RiskCellItem, RiskLevelRanges, clamp_fraction, clamp_level
from .risk_math import classify, combine_controls, inherent, residual_from_controls, round_score

LOG = logging.getLogger("grc_riskmath.helpers")

COLUMNS = [
    "risk_id", "code", "name", "description", "owner", "process",
    "probability", "impact", "inherent_risk", "control_effectiveness",
    "combined_effectiveness", "residual_risk", "inherent_level",
    "residual_level", "timestamp",
]


def _path(path: Optional[str]) -> str:
    return path or get_csv_file_path()


def load_df(path: Optional[str] = None) -> pd.DataFrame:
    """Load the risk register from CSV or return an empty DataFrame."""
    path = _path(path)
    if os.path.exists(path):
        return pd.read_csv(path, dtype={"control_effectiveness": str})
    return pd.DataFrame(columns=COLUMNS)


def save_record(record: Dict, path: Optional[str] = None) -> None:
    """Append a dictionary record to the register CSV."""
    path = _path(path)
    df = load_df(path)
    new_df = pd.DataFrame([record], columns=COLUMNS)
    df = new_df if df.empty else pd.concat([df, new_df], ignore_index=True)
    df.to_csv(path, index=False)
    LOG.info("Saved risk %s to %s", record.get("code"), path)


def format_effectiveness(values: Iterable[float]) -> str:
    return ";".join(f"{clamp_fraction(v):g}" for v in values)


def parse_effectiveness(raw) -> List[float]:
    """Parse the ';'-joined effectiveness column. Blank cells mean no controls."""
    if raw is None or (isinstance(raw, float) and pd.isna(raw)):
        return []
    values = []
    for part in str(raw).split(";"):
        part = part.strip()
        if not part:
            continue
        try:
            values.append(clamp_fraction(float(part)))
        except ValueError:
            LOG.warning("Ignoring bad control effectiveness %r", part)
    return values


def build_record(
    code: str,
    name: str,
    probability: int,
    impact: int,
    control_effectiveness: Optional[Iterable[float]] = None,
    description: str = "",
    owner: str = "",
    process: str = "",
    ranges: Optional[RiskLevelRanges] = None,
    precision: int = 0,
) -> Dict:
    effectiveness = [clamp_fraction(e) for e in (control_effectiveness or [])]
    probability = clamp_level(probability, default=1)
    impact = clamp_level(impact, default=1)
    inherent_score = inherent(probability, impact)
    combined = combine_controls(effectiveness)
    residual = residual_from_controls(inherent_score, combined, precision)
    return {
        "risk_id": str(uuid.uuid4()),
        "code": code,
        "name": name,
        "description": description[:400],
        "owner": owner,
        "process": process,
        "probability": probability,
        "impact": impact,
        "inherent_risk": inherent_score,
        "control_effectiveness": format_effectiveness(effectiveness),
        "combined_effectiveness": round_score(combined, 4),
        "residual_risk": residual,
        "inherent_level": classify(inherent_score, ranges).label,
        "residual_level": classify(residual, ranges).label,
        "timestamp": pd.Timestamp.now().isoformat(),
    }


def df_to_cell_items(df: pd.DataFrame) -> List[RiskCellItem]:
    """Turn register rows into heatmap items, skipping unreadable rows."""
    items = []
    for _, row in df.iterrows():
        try:
            items.append(RiskCellItem(
                id=str(row["risk_id"]),
                code=str(row["code"]),
                name="" if pd.isna(row.get("name")) else str(row["name"]),
                probability=int(row["probability"]),
                impact=int(row["impact"]),
                control_effectiveness=parse_effectiveness(row.get("control_effectiveness")),
            ))
        except (ValueError, KeyError, TypeError, ValidationError) as e:
            LOG.warning("Skipping register row %s: %s", row.get("risk_id"), e)
            continue
    return items
