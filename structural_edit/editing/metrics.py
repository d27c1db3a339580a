"""
Edit metrics: records structural-edit outcomes in a JSONL log file.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

_METRICS_DIR = ".structural_edit"
_METRICS_FILE = "edit_metrics.jsonl"


def _metrics_path(metrics_dir: str | None = None) -> str:
    """Return the path to the metrics file."""
    base = metrics_dir or os.path.join(os.getcwd(), _METRICS_DIR)
    return os.path.join(base, _METRICS_FILE)


def log_edit_metric(data: dict, metrics_dir: str | None = None) -> None:
    """Append a single edit metric entry to the JSONL log.

    Parameters
    ----------
    data:
        Metric fields to log (action, applied, elapsedMs, edits, error).
    metrics_dir:
        Directory holding the log. Defaults to ``.structural_edit`` in CWD.
    """
    path = _metrics_path(metrics_dir)

    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("[AstTool] Failed to write metrics: %s", exc)


def read_edit_stats(
    last_n: int = 50,
    metrics_dir: str | None = None,
) -> dict:
    """Compute rolling statistics from the metrics log.

    Parameters
    ----------
    last_n:
        Number of most-recent entries to include.
    metrics_dir:
        Directory holding the log.

    Returns
    -------
    dict
        ``total_edits``, ``success_rate``, ``soft_miss_rate``,
        ``failure_rate`` and ``avg_elapsed_ms``, plus ``actions`` mapping
        each action to its share of the calls (all rates in percent).
    """
    path = _metrics_path(metrics_dir)

    entries: list[dict] = []
    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        try:
                            entries.append(json.loads(line))
                        except json.JSONDecodeError:
                            continue
        except OSError as exc:
            logger.warning("[AstTool] Failed to read metrics: %s", exc)

    entries = entries[-last_n:]

    if not entries:
        return {
            "total_edits": 0,
            "success_rate": 0.0,
            "soft_miss_rate": 0.0,
            "failure_rate": 0.0,
            "avg_elapsed_ms": 0.0,
            "actions": {},
        }

    total = len(entries)
    failures = sum(1 for e in entries if e.get("error"))
    successes = sum(1 for e in entries if not e.get("error") and e.get("applied"))
    soft_misses = total - failures - successes
    elapsed = [e["elapsedMs"] for e in entries if isinstance(e.get("elapsedMs"), (int, float))]
    actions = Counter(e.get("action", "unknown") for e in entries)

    return {
        "total_edits": total,
        "success_rate": successes / total * 100,
        "soft_miss_rate": soft_misses / total * 100,
        "failure_rate": failures / total * 100,
        "avg_elapsed_ms": sum(elapsed) / len(elapsed) if elapsed else 0.0,
        "actions": {
            action: count / total * 100
            for action, count in actions.most_common()
        },
    }
