"""Command line interface for the governance engine.

Usage examples:
    meshgov replay script.json --state ./council.json --audit-log ./audit.jsonl
    meshgov show --state ./council.json
    meshgov simulate --members 5 --rounds 300 --seed 7 --out ./results/simulation

A replay script is a JSON object::

    {
      "members": ["0x...", "0x...", "0x..."],
      "actions": [{"op": "admit", "voter": "0x...", "subject": "0x..."}]
    }

When ``members`` is omitted the council is resumed from ``--state``.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from meshgov.config import get_settings, resolve_path
from meshgov.engine import VotingEngine
from meshgov.errors import GovernanceError
from meshgov.logger import setup_logging
from meshgov.notifier import AuditLog, EventBus
from meshgov.simulation import SimulationParams, run_simulation
from meshgov.store import load_state, save_state

LOGGER = logging.getLogger(__name__)

_OPERATIONS = {
    "admit": VotingEngine.vote_to_admit,
    "expel": VotingEngine.vote_to_expel,
}


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments.

    Returns:
        Parsed arguments as a namespace.
    """
    parser = argparse.ArgumentParser(prog="meshgov", description="Majority-vote council governance.")
    parser.add_argument("--log-level", dest="log_level", default=None, help="Logging level (default from settings)")
    sub = parser.add_subparsers(dest="command", required=True)

    replay = sub.add_parser("replay", help="Apply a JSON script of votes")
    replay.add_argument("script", type=Path, help="Path to the replay script")
    replay.add_argument("--state", type=Path, default=None, help="State file to resume from and save to")
    replay.add_argument("--audit-log", dest="audit_log", type=Path, default=None,
                        help="Append notifications to this JSON-lines file")

    show = sub.add_parser("show", help="Print a persisted council state")
    show.add_argument("--state", type=Path, default=None, help="State file (default from settings)")

    simulate = sub.add_parser("simulate", help="Run a randomised governance simulation")
    simulate.add_argument("--members", type=int, default=5, help="Founding council size")
    simulate.add_argument("--rounds", type=int, default=200, help="Number of votes to cast")
    simulate.add_argument("--admit-probability", dest="admit_probability", type=float, default=0.5,
                          help="Probability that a round is an admission vote")
    simulate.add_argument("--pool", dest="candidate_pool", type=int, default=10,
                          help="Number of outside identities available as candidates")
    simulate.add_argument("--seed", type=int, default=None, help="RNG seed (default from settings)")
    simulate.add_argument("--out", dest="output_dir", type=Path, default=Path("./results/simulation"),
                          help="Directory to write outputs")
    simulate.add_argument("--no-plot", dest="plot", action="store_false", help="Skip the trajectory figure")

    return parser.parse_args(argv)


def _fail(error: str, message: str) -> int:
    print(json.dumps({"ok": False, "error": error, "message": message}), file=sys.stderr)
    return 2


def _summary(engine: VotingEngine) -> Dict[str, Any]:
    state = engine.snapshot()
    payload = state.to_payload()
    payload["member_count"] = state.member_count
    return payload


def _apply_action(engine: VotingEngine, index: int, action: Any) -> Dict[str, Any]:
    if not isinstance(action, dict):
        return {
            "index": index,
            "ok": False,
            "error": "invalid_action",
            "message": f"Action must be a JSON object, got {type(action).__name__}",
        }
    op = str(action.get("op", "")).lower()
    result: Dict[str, Any] = {
        "index": index,
        "op": op,
        "voter": action.get("voter"),
        "subject": action.get("subject"),
    }
    vote = _OPERATIONS.get(op)
    if vote is None:
        result.update(ok=False, error="unknown_operation", message=f"Unknown operation {op!r}")
        return result
    try:
        committed = vote(engine, action.get("voter"), action.get("subject"))
    except GovernanceError as exc:
        result.update(ok=False, error=exc.code, message=str(exc))
    else:
        result.update(ok=True, committed=committed, epoch=engine.epoch)
    return result


def _read_script(path: Path) -> Dict[str, Any]:
    """Load a replay script, raising ``ValueError`` when its shape is wrong."""
    with path.open("r", encoding="utf-8") as f:
        script = json.load(f)
    if not isinstance(script, dict):
        raise ValueError("Replay script must be a JSON object")
    if not isinstance(script.get("actions", []), list):
        raise ValueError("'actions' must be a list")
    members = script.get("members")
    if members is not None and not isinstance(members, list):
        raise ValueError("'members' must be a list")
    return script


def cmd_replay(args: argparse.Namespace) -> int:
    try:
        script = _read_script(args.script)
    except FileNotFoundError as exc:
        return _fail("not_found", str(exc))
    except ValueError as exc:
        # json.JSONDecodeError is a ValueError too
        return _fail("invalid_script", f"{args.script}: {exc}")

    settings = get_settings()
    bus = EventBus()
    audit_path = args.audit_log
    if audit_path is None and settings.audit_log_enabled:
        audit_path = settings.audit_log_path
    if audit_path is not None:
        AuditLog(audit_path).attach(bus)

    try:
        if script.get("members") is not None:
            engine = VotingEngine(script["members"], event_bus=bus)
        else:
            engine = load_state(resolve_path(args.state, settings.state_path), event_bus=bus)
    except GovernanceError as exc:
        return _fail(exc.code, str(exc))
    except FileNotFoundError as exc:
        return _fail("not_found", str(exc))

    results: List[Dict[str, Any]] = [
        _apply_action(engine, i, action) for i, action in enumerate(script.get("actions", []))
    ]

    if args.state is not None:
        save_state(engine, args.state)

    print(json.dumps({"results": results, "state": _summary(engine)}, indent=2))
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    path = resolve_path(args.state, get_settings().state_path)
    try:
        engine = load_state(path)
    except GovernanceError as exc:
        return _fail(exc.code, str(exc))
    except FileNotFoundError as exc:
        return _fail("not_found", str(exc))
    print(json.dumps(_summary(engine), indent=2))
    return 0


def cmd_simulate(args: argparse.Namespace) -> int:
    seed = args.seed if args.seed is not None else get_settings().simulation_seed
    try:
        params = SimulationParams(
            initial_members=args.members,
            rounds=args.rounds,
            admit_probability=args.admit_probability,
            candidate_pool=args.candidate_pool,
            seed=seed,
        )
        report = run_simulation(params)
    except GovernanceError as exc:
        return _fail(exc.code, str(exc))
    except ValueError as exc:
        return _fail("invalid_parameters", str(exc))

    output_dir: Path = args.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    data = report.to_payload()
    data["timestamp"] = datetime.now(timezone.utc).isoformat()
    if args.plot:
        from meshgov.plotting import save_trajectory_plot

        figure = save_trajectory_plot(report, output_path=output_dir / "trajectory.png")
        data["figures"] = {"trajectory": str(figure)}

    data_path = output_dir / "simulation.json"
    with data_path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)

    LOGGER.info("Simulation finished: %s admissions, %s expulsions", report.admissions, report.expulsions)
    print(json.dumps({"output": str(data_path), "outcomes": report.outcomes}, indent=2))
    return 0


_COMMANDS = {
    "replay": cmd_replay,
    "show": cmd_show,
    "simulate": cmd_simulate,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entrypoint for the ``meshgov`` console script."""
    args = parse_args(argv)
    setup_logging(level=args.log_level)
    return _COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
