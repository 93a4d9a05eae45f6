import importlib.util
from pathlib import Path

import pytest

from config.settings import Settings
from JackpotControl.common.states import RoundState
from JackpotControl.errors import FatalStartupError
from JackpotControl.keeper import KeeperContext

from tests.helpers import FakeRpc

SCRIPTS = Path(__file__).resolve().parents[1] / "scripts"


def load_script(name):
    spec = importlib.util.spec_from_file_location(f"script_{name}", SCRIPTS / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def settings(tmp_path):
    return Settings(_env_file=None, BASE_DIR=tmp_path)


def install(monkeypatch, module, settings, context=None, error=None):
    monkeypatch.setattr(module, "load_settings", lambda _env=None: settings)

    def connect(_settings):
        if error is not None:
            raise error
        return context

    monkeypatch.setattr(module, "connect", connect)


def test_deposit_defaults_to_minimum():
    deposit = load_script("deposit")
    assert deposit.parse_args([]).lamports == 50_000_000
    assert deposit.parse_args(["--sol", "0.25"]).lamports == 250_000_000
    assert deposit.parse_args(["--lamports", "60000000"]).lamports == 60_000_000


def test_deposit_rejects_below_minimum():
    deposit = load_script("deposit")
    with pytest.raises(SystemExit):
        deposit.parse_args(["--sol", "0.01"])


@pytest.mark.parametrize("name", ["initialize", "start_round", "deposit", "withdraw_pot"])
def test_script_reports_startup_failure(monkeypatch, settings, capsys, name):
    module = load_script(name)
    install(monkeypatch, module, settings, error=FatalStartupError("keypair file missing"))

    assert module.main([]) == 1
    assert "keypair file missing" in capsys.readouterr().out


@pytest.mark.parametrize("name", ["initialize", "start_round", "deposit", "withdraw_pot"])
def test_script_submits_one_transaction(monkeypatch, settings, signer, accounts, capsys, name):
    module = load_script(name)
    rpc = FakeRpc()
    install(monkeypatch, module, settings, KeeperContext(settings, rpc, signer, accounts))

    assert module.main([]) == 0
    assert len(rpc.transactions) == 1
    assert rpc.transactions[0].message.account_keys[0] == signer.pubkey
    assert "outcome=confirmed" in capsys.readouterr().out


def test_start_round_reports_rejection(monkeypatch, settings, signer, accounts, program, capsys):
    module = load_script("start_round")
    program.state = RoundState.ACTIVE
    rpc = FakeRpc(program)
    install(monkeypatch, module, settings, KeeperContext(settings, rpc, signer, accounts))

    assert module.main([]) == 1
    assert "InvalidState" in capsys.readouterr().out
