"""Configuration settings for the study exam agent"""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Paths
BASE_DIR = Path(__file__).parent.parent
HISTORY_DIR = Path(os.getenv("HISTORY_DIR", str(BASE_DIR / "history")))

# API Keys
# The primary key is tried first, fallbacks in the order given.
# Keys are only rotated on quota / rate-limit errors.
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_FALLBACK_API_KEYS = os.getenv("OPENAI_FALLBACK_API_KEYS", "")


def _key_pool(primary, fallbacks: str) -> list:
    keys = [primary] + fallbacks.split(",")
    pool = []
    for key in keys:
        key = (key or "").strip()
        if key and key not in pool:
            pool.append(key)
    return pool


API_KEYS = _key_pool(OPENAI_API_KEY, OPENAI_FALLBACK_API_KEYS)

# Model Configuration
LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")
TEMPERATURE = float(os.getenv("TEMPERATURE", "0.3"))
GRADING_TEMPERATURE = float(os.getenv("GRADING_TEMPERATURE", "0.1"))

# Material Processing
CHUNK_SIZE = int(os.getenv("CHUNK_SIZE", "4000"))
CHUNK_OVERLAP = int(os.getenv("CHUNK_OVERLAP", "200"))
# Upper bound on material text sent with a single topic extraction request
MAX_MATERIAL_CHARS = int(os.getenv("MAX_MATERIAL_CHARS", "60000"))

# Scoring
MAX_SCORE = 10
# AI-graded answers count as correct at or above this score
SUBJECTIVE_PASS_SCORE = 7
# Accuracy (percent) at which a past exam is shown as passed
PASSING_ACCURACY = float(os.getenv("PASSING_ACCURACY", "70"))

# History
HISTORY_KEY = "soma-exam-history"
HISTORY_FILE = HISTORY_DIR / f"{HISTORY_KEY}.json"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
