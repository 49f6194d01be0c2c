"""
Data models for MongoDB documents.
Structure of the chart_mappings collection (one document per profile).
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# ---------------------------------------------------------------------------
# Chart mapping record (collection: chart_mappings)
# profile + flat mapping record keyed barX, pieAgg, ... + updatedAt
# ---------------------------------------------------------------------------
MAPPING_FIELDS = ["profile", "mapping", "updatedAt"]


def mapping_doc(
    profile: str,
    mapping: Dict[str, Any],
    updated_at: Optional[datetime] = None,
) -> dict:
    """Build a mapping document for upsert. mapping is ChartMappings.to_record()."""
    return {
        "profile": profile,
        "mapping": dict(mapping),
        "updatedAt": updated_at or datetime.now(timezone.utc),
    }
