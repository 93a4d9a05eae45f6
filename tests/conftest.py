import sys
from pathlib import Path  # noqa: E402

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import logging  # noqa: E402

import pytest  # noqa: E402
from solders.keypair import Keypair  # noqa: E402

from config.settings import DEFAULT_PROGRAM_ID  # noqa: E402
from JackpotControl.addresses import ProgramAccounts  # noqa: E402
from utils.signer import KeypairSigner  # noqa: E402

from tests.helpers import FakeClock, FakeJackpotProgram, FakeRpc, new_address  # noqa: E402


@pytest.fixture
def signer():
    return KeypairSigner(Keypair())


@pytest.fixture
def accounts():
    return ProgramAccounts.resolve(DEFAULT_PROGRAM_ID, buyback=new_address(), fee=new_address())


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def program(clock):
    return FakeJackpotProgram(clock=clock, last_reset=clock.now)


@pytest.fixture
def fake_rpc(program):
    return FakeRpc(program)


@pytest.fixture(autouse=True)
def _restore_root_handlers():
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in before:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
