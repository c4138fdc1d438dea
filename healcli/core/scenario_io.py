"""Scenario save/load functionality.

A scenario is the ordered list of recorded actions for one test. Saved
scenarios may predate locator bundles; callers normalize after loading.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from healcli.models.locator import RecordedAction

logger = logging.getLogger("heal.scenario_io")


class ScenarioError(Exception):
    """Error reading a scenario file."""

    pass


@dataclass
class ScenarioData:
    """Recorded scenario.

    Attributes:
        actions: Recorded steps in order
        name: Scenario name (optional)
        saved_at: ISO timestamp of the last save (optional)
        version: Schema version (default: 1)
        extra: Top-level keys not used here, kept on save
    """

    actions: list[RecordedAction]
    name: str | None = None
    saved_at: str | None = None
    version: int = 1
    extra: dict[str, Any] = field(default_factory=dict)


def load_scenario(path: Path) -> ScenarioData:
    """Load a scenario from JSON.

    Accepts ``{"actions": [...]}``, ``{"steps": [...]}`` or a bare list.

    Args:
        path: Scenario JSON file

    Returns:
        Parsed ScenarioData

    Raises:
        ScenarioError: If the file is missing, not JSON, or has no action list
    """
    try:
        with path.open(encoding="utf-8") as f:
            json_data = json.load(f)
    except FileNotFoundError:
        raise ScenarioError(f"Scenario file not found: {path}")
    except json.JSONDecodeError as e:
        raise ScenarioError(f"Invalid JSON in {path}: {e}")
    except (OSError, UnicodeDecodeError) as e:
        raise ScenarioError(f"Cannot read {path}: {e}")

    if isinstance(json_data, list):
        json_data = {"actions": json_data}
    if not isinstance(json_data, dict):
        raise ScenarioError("Scenario must be a JSON object or list")

    raw_actions = json_data.get("actions", json_data.get("steps"))
    if not isinstance(raw_actions, list):
        raise ScenarioError(f"Missing 'actions' list in {path}")

    actions: list[RecordedAction] = []
    for i, item in enumerate(raw_actions):
        if not isinstance(item, dict):
            logger.warning(f"Skipping step {i + 1} in {path}: not an object")
            continue
        actions.append(RecordedAction.from_dict(item))

    version = json_data.get("version", 1)
    return ScenarioData(
        actions=actions,
        name=json_data.get("name"),
        saved_at=json_data.get("saved_at"),
        version=version if isinstance(version, int) else 1,
        extra={
            k: v for k, v in json_data.items()
            if k not in ("actions", "steps", "name", "saved_at", "version")
        },
    )


def save_scenario(data: ScenarioData, path: Path) -> Path:
    """Save a scenario to JSON.

    Args:
        data: ScenarioData to save
        path: Output file

    Returns:
        Path to saved file
    """
    saved_at = data.saved_at
    if saved_at is None:
        saved_at = datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")

    json_data: dict[str, Any] = dict(data.extra)
    json_data.update({
        "version": data.version,
        "name": data.name,
        "saved_at": saved_at,
        "actions": [action.to_dict() for action in data.actions],
    })

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(json_data, f, indent=2)

    logger.debug(f"Saved scenario to {path}")
    return path
