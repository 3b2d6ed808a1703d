from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_DEFAULT_SEED = Path(__file__).resolve().parent.parent / "data" / "seed.json"


@dataclass(frozen=True)
class StoreConfig:
    backend: str = os.getenv("EVENTHUB_STORE", "memory")
    mongodb_uri: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
    database: str = os.getenv("MONGODB_DATABASE", "eventhub")
    events_collection: str = "events"
    users_collection: str = "users"
    seed_path: Path = Path(os.getenv("EVENTHUB_SEED_PATH", str(_DEFAULT_SEED)))
    seed_demo_users: bool = os.getenv("EVENTHUB_DEMO_USERS", "1") != "0"


DEFAULT_STORE_CONFIG = StoreConfig()
