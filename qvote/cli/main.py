#!/usr/bin/env python3
"""
QVote CLI

Inspect configuration and replay voting scripts against an in-memory ledger.

Usage:
    qvote config [--path FILE]
    qvote replay <script.json> [--config FILE] [--strict]

Script format:
    {
        "start_block": 1,
        "balances": {"alice": 100, "bob": 100},
        "steps": [
            {"op": "register", "account": "alice"},
            {"op": "propose", "account": "alice", "description": "raise fees"},
            {"op": "vote", "account": "alice", "proposal_id": 0, "amount": 5, "direction": "aye"},
            {"op": "advance", "blocks": 10},
            {"op": "close", "account": "alice", "proposal_id": 0},
            {"op": "claim", "account": "alice", "proposal_id": 0}
        ]
    }
"""

import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
from rich.console import Console
from rich.table import Table

from qvote import __version__
from qvote.config import EngineConfig, load_config
from qvote.exceptions import ConfigurationError, VotingError
from qvote.governance import QuadraticVotingEngine
from qvote.host import InMemoryBalances, ManualClock, Origin
from qvote.logger import set_log_level


@dataclass
class StepResult:
    """Outcome of one replayed step."""
    index: int
    op: str
    ok: bool
    detail: str


def _signed(step: Dict[str, Any]) -> Origin:
    return Origin.signed(step["account"])


def run_step(engine: QuadraticVotingEngine, clock: ManualClock, step: Dict[str, Any]) -> str:
    """Apply one script step and describe its result."""
    op = step.get("op")
    if op == "register":
        engine.register(Origin.root(), step["account"])
        return f"registered {step['account']}"
    if op == "propose":
        proposal_id = engine.propose(_signed(step), step.get("description", "").encode())
        return f"proposal #{proposal_id}"
    if op == "vote":
        event = engine.vote(
            _signed(step),
            step["amount"],
            step.get("direction", "aye"),
            step["proposal_id"],
        )
        return f"{event.name} (frozen={engine.frozen(step['account'])})"
    if op == "close":
        outcome = engine.close(_signed(step), step["proposal_id"])
        return f"outcome {outcome.value}"
    if op == "claim":
        unlocked = engine.claim(_signed(step), step["proposal_id"])
        state = "unlocked" if unlocked else "nothing unlocked"
        return f"{state} (frozen={engine.frozen(step['account'])})"
    if op == "advance":
        return f"block {clock.advance(step.get('blocks', 1))}"
    raise ValueError(f"Unknown op: {op!r}")


def run_script(
    engine: QuadraticVotingEngine,
    clock: ManualClock,
    steps: List[Dict[str, Any]],
) -> List[StepResult]:
    """Run every step; voting errors are recorded per step, not raised."""
    results = []
    for index, step in enumerate(steps):
        op = str(step.get("op"))
        try:
            detail = run_step(engine, clock, step)
            results.append(StepResult(index, op, True, detail))
        except VotingError as e:
            results.append(StepResult(index, op, False, f"{type(e).__name__}: {e}"))
    return results


def build_engine(script: Dict[str, Any], config: EngineConfig):
    balances = InMemoryBalances(script.get("balances", {}))
    clock = ManualClock(script.get("start_block", 0))
    engine = QuadraticVotingEngine.from_config(config, balances, clock)
    return engine, balances, clock


@click.group()
@click.version_option(version=__version__, prog_name="qvote")
def cli():
    """QVote Command Line Interface

    Quadratic voting engine tools.
    """
    pass


@cli.command("config")
@click.option("--path", "-p", type=click.Path(), help="Path to qvote.toml")
def config_cmd(path: Optional[str]):
    """Print the resolved configuration as JSON."""
    try:
        cfg = load_config(path)
    except ConfigurationError as e:
        raise click.ClickException(str(e))
    click.echo(json.dumps(cfg.to_dict(), indent=2))


@cli.command("replay")
@click.argument("script_file", type=click.Path(exists=True))
@click.option("--config", "-c", "config_path", type=click.Path(), help="Path to qvote.toml")
@click.option("--strict", is_flag=True, help="Exit with status 1 if any step fails")
def replay_cmd(script_file: str, config_path: Optional[str], strict: bool):
    """Replay a JSON voting script against in-memory balances.

    Examples:

        qvote replay scenario.json

        qvote replay scenario.json --config qvote.toml --strict
    """
    try:
        cfg = load_config(config_path)
    except ConfigurationError as e:
        raise click.ClickException(str(e))
    set_log_level(cfg.logging.level)

    try:
        script = json.loads(Path(script_file).read_text())
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid script: {e}")

    engine, balances, clock = build_engine(script, cfg)
    try:
        results = run_script(engine, clock, script.get("steps", []))
    except (KeyError, ValueError) as e:
        raise click.ClickException(f"Malformed step: {e}")

    console = Console()
    table = Table(title=f"Replay of {Path(script_file).name}")
    table.add_column("#", justify="right")
    table.add_column("op")
    table.add_column("result")
    for r in results:
        status = "[green]ok[/green]" if r.ok else "[red]error[/red]"
        table.add_row(str(r.index), r.op, f"{status} {r.detail}")
    console.print(table)

    frozen = Table(title="Frozen deposits")
    frozen.add_column("account")
    frozen.add_column("balance", justify="right")
    frozen.add_column("frozen", justify="right")
    for account in sorted(script.get("balances", {})):
        frozen.add_row(
            account,
            str(balances.total_balance(account)),
            str(engine.frozen(account)),
        )
    console.print(frozen)

    if strict and not all(r.ok for r in results):
        sys.exit(1)


if __name__ == "__main__":
    cli()
