"""Vault simulator CLI.

Usage:
  python -m managed_vault.apps.vault_cli simulate --scenario scenarios/two_token.yaml --db sim.db
  python -m managed_vault.apps.vault_cli history --db sim.db --limit 20
  python -m managed_vault.apps.vault_cli replay --db sim.db
"""
from __future__ import annotations
import argparse
import json
import sys
from typing import List, Optional

from dotenv import load_dotenv
from loguru import logger
from rich.console import Console
from rich.table import Table

from managed_vault.apps.scenario import ScenarioRunner, load_scenario
from managed_vault.core.config import ConfigError, LoggingSettings, load_settings
from managed_vault.core.errors import VaultError
from managed_vault.core.mathutils import from_fixed
from managed_vault.persist.journal import EventJournal
from managed_vault.persist.replay import ReplayError, rebuild_snapshot


def setup_logging(cfg: LoggingSettings) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=cfg.level.upper(),
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
    )
    if cfg.file:
        logger.add(
            cfg.file,
            level=cfg.level.upper(),
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} - {level} - {message}",
            rotation=cfg.rotation,
        )
    logger.info(f"Logging level set to {cfg.level.upper()}")


def parse_args(argv: Optional[List[str]] = None):
    p = argparse.ArgumentParser(description="Managed vault simulator")
    p.add_argument('--settings', default=None, help='Settings YAML (defaults + env overrides when omitted)')
    sub = p.add_subparsers(dest='cmd', required=True)
    sp = sub.add_parser('simulate')
    sp.add_argument('--scenario', required=True)
    sp.add_argument('--db', default=None, help='Journal path (overrides persistence.db_path)')
    hp = sub.add_parser('history')
    hp.add_argument('--db', required=True)
    hp.add_argument('--limit', type=int, default=50)
    rp = sub.add_parser('replay')
    rp.add_argument('--db', required=True)
    rp.add_argument('--upto', type=int, default=None)
    return p.parse_args(argv)


def _fmt(x: int) -> str:
    return f"{from_fixed(x):.6f}"


def print_vault(vault, console: Console) -> None:
    t = Table(title=f"Vault ({vault.phase.value})")
    for col in ("token", "holding", "weight", "fees accrued"):
        t.add_column(col)
    weights = vault.normalized_weights()
    fees = vault.manager_fee_total()
    for i, token in enumerate(vault.tokens):
        t.add_row(token, _fmt(vault.holding(i)), _fmt(weights[i]), _fmt(fees[i]))
    console.print(t)


def cmd_simulate(args, settings, console: Console) -> int:
    scenario = load_scenario(args.scenario)
    runner = ScenarioRunner(scenario, settings)
    journal = EventJournal(args.db or settings.persistence.db_path, settings.persistence.snapshot_every)
    journal.set_meta("description", scenario.description)
    journal.attach(runner.vault)
    try:
        runner.run()
    except VaultError as e:
        logger.error(f"[Scenario] aborted: {e}")
        print_vault(runner.vault, console)
        return 1
    finally:
        journal.close()
    print_vault(runner.vault, console)
    return 0


def cmd_history(args, console: Console) -> int:
    journal = EventJournal(args.db)
    try:
        events = journal.events(limit=args.limit)
    finally:
        journal.close()
    t = Table(title="Vault events")
    for col in ("seq", "ts", "type", "holdings after"):
        t.add_column(col)
    for e in events:
        t.add_row(str(e.seq), str(e.timestamp), e.event_type, ", ".join(_fmt(h) for h in e.holdings_after))
    console.print(t)
    return 0


def cmd_replay(args, console: Console) -> int:
    journal = EventJournal(args.db)
    try:
        snapshot = rebuild_snapshot(journal, upto_seq=args.upto)
    except ReplayError as e:
        logger.error(f"[Replay] {e}")
        return 1
    finally:
        journal.close()
    console.print_json(json.dumps(snapshot.model_dump()))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    try:
        settings = load_settings(args.settings)
    except ConfigError as e:
        logger.error(str(e))
        return 2
    setup_logging(settings.logging)
    console = Console()
    try:
        if args.cmd == 'simulate':
            return cmd_simulate(args, settings, console)
        if args.cmd == 'history':
            return cmd_history(args, console)
        if args.cmd == 'replay':
            return cmd_replay(args, console)
    except ConfigError as e:
        logger.error(str(e))
        return 2
    return 0


if __name__ == '__main__':  # pragma: no cover
    sys.exit(main())
