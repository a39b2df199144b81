"""Utilities for persisting search payloads."""

import json
import logging
import re
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def save_search_results(
    payload: str,
    results_dir: Path,
    prefix: str = "search",
    metadata: dict[str, Any] | None = None,
) -> Path:
    """Save a search payload to a file in the results directory.

    Args:
        payload: The JSON text returned to the caller.
        results_dir: Directory to write into (must exist).
        prefix: Filename prefix, usually derived from the query.
        metadata: Written next to the payload as ``<name>.meta.json`` when given.

    Returns:
        Path to the saved file.
    """
    now = datetime.now()
    timestamp = now.strftime("%Y%m%d_%H%M%S")
    safe_prefix = re.sub(r"[^\w\-]", "_", prefix)[:30]
    # Random token keeps concurrent saves in the same second apart
    file_path = results_dir / f"{timestamp}_{uuid.uuid4().hex[:8]}_{safe_prefix}.json"

    file_path.write_text(payload, encoding="utf-8")
    if metadata:
        meta = {"saved_at": now.isoformat(), "file": file_path.name, **metadata}
        file_path.with_suffix(".meta.json").write_text(json.dumps(meta, indent=2), encoding="utf-8")

    logger.info(f"Saved results to {file_path}")
    return file_path
