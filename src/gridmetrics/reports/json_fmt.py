"""
JSON output formatter.

Produces structured JSON output for machine consumption and downstream automation.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from gridmetrics.reliability.models import MetricsResult

FORMAT_VERSION = "1.0"


def format_json(result: MetricsResult) -> str:
    """
    Format a metrics result as JSON.

    Output structure:
    {
        "version": "1.0",
        "generated_at": "2024-03-01T09:00:00+00:00",
        "filters": {...},
        "period": {...},
        "indices": {...},
        ...
    }
    """
    output: dict[str, Any] = {
        "version": FORMAT_VERSION,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        **result.to_dict(),
    }
    return json.dumps(output, indent=2, ensure_ascii=False)
