from __future__ import annotations

import logging

import pytest
import structlog
from typer.testing import CliRunner

from nfteth import state_file
from nfteth.cli import app
from nfteth.version import __version__

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    structlog.reset_defaults()


@pytest.fixture
def state(tmp_path):
    return tmp_path / "state.json"


def run(state, *args):
    return runner.invoke(app, ["--state", str(state), *args])


def _setup(state):
    assert run(state, "init", "--admin", "admin").exit_code == 0
    assert run(state, "deploy-token", "DERC20", "--name", "DummyErc20", "--owner", "admin").exit_code == 0
    assert run(state, "faucet", "derc20", "alice", "10000", "--caller", "admin").exit_code == 0
    assert run(state, "whitelist", "derc20", "--caller", "admin").exit_code == 0


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_commands_need_a_state_file(state):
    result = run(state, "show")
    assert result.exit_code == 1
    assert "init" in result.stdout


def test_init_refuses_to_overwrite(state):
    assert run(state, "init").exit_code == 0
    assert run(state, "init").exit_code == 1
    assert run(state, "init", "--force").exit_code == 0


def test_deposit_and_redeem_flow(state):
    _setup(state)
    assert run(state, "approve", "derc20", "100", "--caller", "alice").exit_code == 0

    result = run(state, "deposit", "derc20", "100", "--caller", "alice")
    assert result.exit_code == 0, result.stdout
    assert "certificate 1 minted" in result.stdout

    assert run(state, "balance", "derc20", "alice").stdout.strip() == "9900"
    assert run(state, "balance", "derc20", "nfteth").stdout.strip() == "100"

    result = run(state, "transfer-certificate", "1", "bob", "--caller", "alice")
    assert result.exit_code == 0, result.stdout

    result = run(state, "redeem", "1", "--caller", "alice")
    assert result.exit_code == 1
    assert "OnlyNftOwner" in result.stdout

    result = run(state, "redeem", "1", "--caller", "bob")
    assert result.exit_code == 0, result.stdout
    assert run(state, "balance", "derc20", "bob").stdout.strip() == "100"

    result = run(state, "redeem", "1", "--caller", "bob")
    assert result.exit_code == 1
    assert "NonexistentToken" in result.stdout


def test_failures_print_codes_and_leave_state_alone(state):
    _setup(state)
    before = state.read_text()

    result = run(state, "whitelist", "derc20", "--caller", "alice")
    assert result.exit_code == 1
    assert "OnlyOwner" in result.stdout

    result = run(state, "deposit", "derc20", "5", "--caller", "alice")
    assert result.exit_code == 1
    assert "NotEnoughAllowance" in result.stdout

    assert run(state, "account", "carol").exit_code == 0
    before = state.read_text()
    result = run(state, "deposit", "derc20", "5", "--caller", "carol")
    assert result.exit_code == 1
    assert "NotEnoughBalance" in result.stdout

    assert state.read_text() == before


def test_unknown_token_is_reported(state):
    run(state, "init")
    result = run(state, "faucet", "0x" + "ab" * 20, "alice", "1")
    assert result.exit_code == 1
    assert "UnknownContract" in result.stdout


def test_show_reports_solvency(state):
    _setup(state)
    run(state, "approve", "derc20", "40", "--caller", "alice")
    run(state, "deposit", "derc20", "40", "--caller", "alice")
    result = run(state, "show")
    assert result.exit_code == 0, result.stdout
    assert "next id: 2" in result.stdout
    assert "solvent" in result.stdout


def test_account_is_remembered(state):
    run(state, "init")
    first = run(state, "account", "carol").stdout.strip()
    assert first.startswith("0x")
    chain = state_file.load(state)
    assert "0x" + chain.labels["carol"].hex() == first


def test_unknown_caller_is_refused_not_created(state):
    _setup(state)
    before = state.read_text()
    result = run(state, "whitelist", "derc20", "--caller", "amdin")
    assert result.exit_code == 1
    assert "UnknownAccount" in result.stdout
    assert "OnlyOwner" not in result.stdout
    assert "amdin" not in state_file.load(state).labels
    assert state.read_text() == before
