import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
import os

from dotenv import load_dotenv

from stay_sync.network.client import fetch_feed
from stay_sync.normalizers.ical import parse_feed
from stay_sync.services.sync import parse_feed_configs

load_dotenv()

FIXTURE_DIR = "tests/fixtures"


# === FIXTURE FETCH + SAVE ===


def save_fixture(data: bytes, filename: str) -> None:
    os.makedirs(FIXTURE_DIR, exist_ok=True)
    path = f"{FIXTURE_DIR}/{filename}"
    with open(path, "wb") as f:
        f.write(data)
    print(f"Saved {filename} ({len(data)} bytes)")


def fetch_all_fixtures() -> None:
    """Download every configured feed and save it as an .ics fixture."""
    for config in parse_feed_configs(os.getenv("FEEDS", "")):
        raw = fetch_feed(config.url)
        events = parse_feed(config.source, raw)
        print(f"{config.source.value}: {len(events)} events")
        save_fixture(raw, f"{config.source.value.lower()}_feed.ics")


# === CLI ===

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Fetch and save channel calendar fixtures.")
    parser.parse_args()
    fetch_all_fixtures()
