"""
Result snapshot files.

A snapshot is the ``name -> bool`` mapping returned by
``FeatureRegistry.result()``, stored as JSON so toggle state can be
inspected or replayed into another registry via ``result(mapping)``.
"""

import json
from datetime import UTC, datetime
from pathlib import Path

from featuretoggle.errors import ValidationError
from featuretoggle.utils.logging import get_logger

log = get_logger(__name__)


def save_snapshot(result: dict[str, bool], path: Path) -> Path:
    """
    Write a result snapshot to ``path``, creating parent directories.

    Returns:
        The path written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "created_at": datetime.now(UTC).isoformat(),
        "features": dict(result),
    }
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
        f.write("\n")

    log.info("Saved result snapshot", path=str(path), n_features=len(result))
    return path


def load_snapshot(path: Path) -> dict[str, bool]:
    """
    Read a result snapshot.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValidationError: If the file is not a snapshot or holds non-bool
            results.
    """
    if not path.exists():
        msg = f"Snapshot not found: {path}"
        raise FileNotFoundError(msg)

    with path.open(encoding="utf-8") as f:
        try:
            payload = json.load(f)
        except json.JSONDecodeError as e:
            msg = f"Snapshot {path} is not valid JSON: {e}"
            raise ValidationError(msg) from e

    features = payload.get("features") if isinstance(payload, dict) else None
    if not isinstance(features, dict):
        msg = f"Snapshot {path} has no 'features' mapping"
        raise ValidationError(msg)

    invalid = [name for name, value in features.items() if not isinstance(value, bool)]
    if invalid:
        msg = f"Snapshot {path} holds non-bool results for: {', '.join(invalid)}"
        raise ValidationError(msg)

    log.info("Loaded result snapshot", path=str(path), n_features=len(features))
    return features
