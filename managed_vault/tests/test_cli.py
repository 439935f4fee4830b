"""
Tests for scenario loading and the simulator CLI.
"""
from pathlib import Path

import pytest
import yaml

from managed_vault.apps.scenario import ScenarioRunner, load_scenario
from managed_vault.apps.vault_cli import main
from managed_vault.core.config import ConfigError
from managed_vault.core.custom_types import VaultPhase
from managed_vault.persist.journal import EventJournal
from managed_vault.persist.replay import rebuild_snapshot

SCENARIO = Path(__file__).parents[2] / "scenarios" / "two_token.yaml"
NEW_MANAGER = "0x00000000000000000000000000000000000000cc"


def test_demo_scenario_runs_to_finalization():
    runner = ScenarioRunner(load_scenario(str(SCENARIO)))
    results = runner.run()
    vault = runner.vault
    assert vault.phase == VaultPhase.FINALIZED
    assert vault.holdings() == [0, 0]
    assert vault.manager == NEW_MANAGER
    # both managers were paid: the old one by claim, the new one at finalize
    usdc = vault.tokens[0]
    assert runner.ledger.balance_of(usdc, runner.scenario.manager) > 0
    assert runner.ledger.balance_of(usdc, NEW_MANAGER) > 0
    assert type(results[3]).__name__ == "CannotSetSwapFeeBeforeCooldown"


def test_scenario_requires_prices_for_non_numeraire(tmp_path):
    raw = yaml.safe_load(SCENARIO.read_text())
    del raw["tokens"][1]["price"]
    path = tmp_path / "bad.yaml"
    path.write_text(yaml.dump(raw))
    with pytest.raises(ConfigError, match="Invalid scenario"):
        load_scenario(str(path))


def test_unexpected_success_is_reported(tmp_path):
    raw = yaml.safe_load(SCENARIO.read_text())
    raw["steps"] = raw["steps"][:2]
    raw["steps"][1]["expect_error"] = "OraclesAreDisabled"
    path = tmp_path / "wrong.yaml"
    path.write_text(yaml.dump(raw))
    runner = ScenarioRunner(load_scenario(str(path)))
    with pytest.raises(ConfigError, match="expected OraclesAreDisabled"):
        runner.run()


def test_cli_simulate_history_replay(tmp_path, capsys):
    db = str(tmp_path / "sim.db")
    assert main(["simulate", "--scenario", str(SCENARIO), "--db", db]) == 0

    journal = EventJournal(db)
    try:
        snap = rebuild_snapshot(journal)
        assert snap.phase == VaultPhase.FINALIZED
        assert journal.get_meta("description") == "Two token demo vault"
    finally:
        journal.close()

    capsys.readouterr()
    assert main(["history", "--db", db, "--limit", "5"]) == 0
    assert "InitialDeposit" in capsys.readouterr().out

    assert main(["replay", "--db", db]) == 0
    assert '"finalized"' in capsys.readouterr().out


def test_cli_bad_settings_file(tmp_path):
    assert main(["--settings", str(tmp_path / "missing.yaml"), "history", "--db", str(tmp_path / "x.db")]) == 2


def test_cli_aborts_on_vault_error(tmp_path):
    raw = yaml.safe_load(SCENARIO.read_text())
    raw["steps"] = raw["steps"][:1] + [{"at": 10, "caller": "manager", "op": "finalize"}]
    path = tmp_path / "abort.yaml"
    path.write_text(yaml.dump(raw))
    assert main(["simulate", "--scenario", str(path), "--db", str(tmp_path / "abort.db")]) == 1
