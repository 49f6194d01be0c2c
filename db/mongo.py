"""
MongoDB preference store for the chart mapping record.
Uses MONGODB_URI from environment; collection: chart_mappings.
Every helper degrades to an empty result / False when MONGODB_URI is not set.
"""
import logging
import os
from typing import Any, Dict

from dotenv import load_dotenv

from db.models import mapping_doc

load_dotenv()

logger = logging.getLogger(__name__)

MONGODB_URI = os.getenv("MONGODB_URI")
DB_NAME = os.getenv("MONGODB_DB_NAME", "codelense")
DEFAULT_PROFILE = os.getenv("CODELENSE_PROFILE", "default")

_client = None
_db = None


def _get_client():
    """Lazy connection to MongoDB."""
    global _client
    if _client is None and MONGODB_URI:
        from pymongo import MongoClient
        _client = MongoClient(MONGODB_URI)
    return _client


def get_db():
    """Return database instance. None if MONGODB_URI not set."""
    global _db
    client = _get_client()
    if client is None:
        return None
    if _db is None:
        _db = client[DB_NAME]
    return _db


def _mappings():
    db = get_db()
    return db["chart_mappings"] if db is not None else None


def load_mappings(profile: str = DEFAULT_PROFILE) -> Dict[str, Any]:
    """Return the stored mapping record for profile, or {} if none / not connected."""
    coll = _mappings()
    if coll is None:
        return {}
    doc = coll.find_one({"profile": profile})
    if doc is None:
        return {}
    return dict(doc.get("mapping") or {})


def save_mappings(profile: str, mapping: Dict[str, Any]) -> bool:
    """Upsert the mapping record. Returns False if not connected."""
    coll = _mappings()
    if coll is None:
        return False
    doc = mapping_doc(profile, mapping)
    coll.replace_one({"profile": profile}, doc, upsert=True)
    logger.info("mappings_saved: profile=%s keys=%d", profile, len(doc["mapping"]))
    return True


def clear_mappings(profile: str = DEFAULT_PROFILE) -> bool:
    """Delete the stored record (reset to defaults). Returns False if not connected."""
    coll = _mappings()
    if coll is None:
        return False
    coll.delete_one({"profile": profile})
    logger.info("mappings_cleared: profile=%s", profile)
    return True
