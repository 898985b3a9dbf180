"""JSON persistence for council state."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from meshgov.engine import VotingEngine
from meshgov.errors import InvalidSnapshot
from meshgov.notifier import EventBus
from meshgov.state import MembershipState

LOGGER = logging.getLogger(__name__)


def save_state(engine: VotingEngine, path: Union[str, Path]) -> Path:
    """Write *engine*'s current state to *path*, replacing it atomically."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = engine.snapshot().to_payload()

    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fp:
            json.dump(payload, fp, indent=2, sort_keys=True)
            fp.flush()
            os.fsync(fp.fileno())
        os.replace(tmp_name, target)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    LOGGER.debug("Saved council state (epoch %s) to %s", payload["epoch"], target)
    return target


def load_state(path: Union[str, Path], *, event_bus: Optional[EventBus] = None) -> VotingEngine:
    """Rebuild an engine from the state file at *path*.

    Raises:
        FileNotFoundError: when *path* does not exist.
        InvalidSnapshot: when the file is not valid JSON or breaks an invariant.
    """
    source = Path(path)
    with source.open("r", encoding="utf-8") as fp:
        try:
            payload = json.load(fp)
        except json.JSONDecodeError as exc:
            raise InvalidSnapshot(f"State file {source} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise InvalidSnapshot(f"State file {source} does not hold an object")
    state = MembershipState.from_payload(payload)
    return VotingEngine.from_state(state, event_bus=event_bus)


__all__ = ["save_state", "load_state"]
