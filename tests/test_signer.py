import json

import pytest
from solders.hash import Hash
from solders.keypair import Keypair

from JackpotControl.common.states import TransitionCommand
from JackpotControl.instructions import build_transition
from utils.signer import KeypairSigner


def test_from_file_round_trip(tmp_path):
    keypair = Keypair()
    path = tmp_path / "id.json"
    path.write_text(json.dumps(list(bytes(keypair))))

    assert KeypairSigner.from_file(path).pubkey == keypair.pubkey()


@pytest.mark.parametrize("content", ["not json", "[1, 2, 3]", json.dumps({"key": 1})])
def test_from_file_rejects_bad_content(tmp_path, content):
    path = tmp_path / "id.json"
    path.write_text(content)
    with pytest.raises(ValueError):
        KeypairSigner.from_file(path)


def test_from_file_missing(tmp_path):
    with pytest.raises(ValueError, match="cannot read"):
        KeypairSigner.from_file(tmp_path / "missing.json")


def test_sign_uses_signer_as_fee_payer(signer, accounts):
    ix = build_transition(TransitionCommand.START_ROUND, accounts, signer.pubkey)
    blockhash = str(Hash.new_unique())

    tx = signer.sign([ix], blockhash)

    assert tx.message.account_keys[0] == signer.pubkey
    assert str(tx.message.recent_blockhash) == blockhash
    tx.verify()
