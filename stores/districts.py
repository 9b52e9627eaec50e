import json
from functools import lru_cache
from pathlib import Path

DISTRICTS_FILE = Path(__file__).with_name("districts.json")


@lru_cache(maxsize=1)
def load_districts() -> dict:
    """Table statique id de district -> nom lisible."""
    with open(DISTRICTS_FILE, "r", encoding="utf-8") as f:
        rows = json.load(f)
    return {str(row["id"]): row["name"] for row in rows}
