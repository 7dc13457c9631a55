import json
import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from .models import ProbabilityWeights, RiskLevelRanges

# Load .env values
load_dotenv()

LOG = logging.getLogger("grc_riskmath.config")

DEFAULT_CSV_FILE_PATH = "risks.csv"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    level = (level or os.getenv("GRC_LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)


def get_csv_file_path() -> str:
    return os.getenv("GRC_RISKS_CSV", DEFAULT_CSV_FILE_PATH)


def get_risk_level_ranges() -> RiskLevelRanges:
    """Band thresholds from the environment, or 6/12/19."""
    raw = {
        "low_max": os.getenv("GRC_RISK_LOW_MAX"),
        "medium_max": os.getenv("GRC_RISK_MEDIUM_MAX"),
        "high_max": os.getenv("GRC_RISK_HIGH_MAX"),
    }
    values = {k: v for k, v in raw.items() if v not in (None, "")}
    if not values:
        return RiskLevelRanges()
    try:
        return RiskLevelRanges(**values)
    except ValidationError as e:
        LOG.warning("Invalid risk level ranges %s, using defaults: %s", values, e)
        return RiskLevelRanges()


def get_risk_decimals() -> int:
    """Decimal places shown for scores; 0 means whole numbers."""
    raw = os.getenv("GRC_RISK_DECIMALS", "0")
    try:
        return max(0, int(raw))
    except ValueError:
        LOG.warning("Invalid GRC_RISK_DECIMALS %r, using 0", raw)
        return 0


def get_probability_weights() -> ProbabilityWeights:
    raw = os.getenv("GRC_PROBABILITY_WEIGHTS")
    if not raw:
        return ProbabilityWeights()
    try:
        return ProbabilityWeights(**json.loads(raw))
    except (ValueError, TypeError) as e:
        # pydantic's ValidationError is a ValueError
        LOG.warning("Invalid GRC_PROBABILITY_WEIGHTS, using defaults: %s", e)
        return ProbabilityWeights()


def get_openai_api_key() -> Optional[str]:
    return os.getenv("OPENAI_API_KEY") or None


def get_openai_model() -> str:
    return os.getenv("OPENAI_MODEL", DEFAULT_OPENAI_MODEL)
