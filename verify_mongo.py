#!/usr/bin/env python3
"""
Preference store check: save a default mapping record under a scratch profile,
load it back, then clear it.
Requires MONGODB_URI in .env or environment.
Run from the project root:  python verify_mongo.py
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from dotenv import load_dotenv
load_dotenv()

PROFILE = "verify-mappings"


def main():
    if not os.getenv("MONGODB_URI"):
        print("MONGODB_URI not set. Add your connection string to .env.")
        return 1

    from analytics.config import ChartMappings
    from db import mongo

    if mongo.get_db() is None:
        print("Could not connect to MongoDB. Check MONGODB_URI.")
        return 1
    print(f"Connected to MongoDB (database: {mongo.DB_NAME}).")

    mappings = ChartMappings.with_defaults(["category", "value"]).edit_chart("bar", aggregator="avg")
    mongo.save_mappings(PROFILE, mappings.to_record())
    print("  Saved 1 mapping record into chart_mappings")

    loaded = ChartMappings.with_defaults(["category", "value"], mongo.load_mappings(PROFILE))
    mongo.clear_mappings(PROFILE)
    print("  Scratch record removed.")

    if loaded == mappings:
        print("\nLoaded record matches. Preference store check passed.")
        return 0
    print("\nLoaded record differs from the saved one. Check the chart_mappings collection.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
