from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class DiscoveryConfig:
    geocoder_url: str = os.getenv("GEOCODER_URL", "https://nominatim.openstreetmap.org/search")
    poi_url: str = os.getenv("POI_URL", "https://photon.komoot.io/api/")
    user_agent: str = os.getenv("DISCOVERY_USER_AGENT", "NearbyConnect/1.0")
    timeout: float = 10.0
    # Benjanapadavu, Bantwal
    anchor_lat: float = 12.8916
    anchor_lon: float = 74.9872
    max_results: int = 50
    suggest_min_chars: int = 4
    suggest_limit: int = 5
    debounce_seconds: float = 0.3


DEFAULT_DISCOVERY_CONFIG = DiscoveryConfig()

CATEGORIES: list[str] = ["hospital", "university", "bank", "supermarket", "clinic", "park"]
