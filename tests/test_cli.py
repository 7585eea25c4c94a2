import json
from pathlib import Path

import pytest

from wasm_tx import cli


@pytest.fixture
def config_file(tmp_path: Path, make_address) -> Path:
    path = tmp_path / "wasm-tx.yaml"
    path.write_text(
        f"""
        chain:
          bech32_prefix: wasm
          signer_endpoint: http://signer.test
        keys:
          me: {make_address(1)}
          ops: {make_address(9)}
        """
    )
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("WASM_TX_CHAIN_ID", "WASM_TX_BECH32_PREFIX", "WASM_TX_SIGNER_ENDPOINT", "WASM_TX_FROM"):
        monkeypatch.delenv(name, raising=False)


class StubSigner:
    instances = []

    def __init__(self, endpoint: str, **_kwargs) -> None:
        self.endpoint = endpoint
        self.submitted = []
        StubSigner.instances.append(self)

    def submit(self, messages, options):
        self.submitted.append((messages, options))
        return {"txhash": "ABC", "code": 0}


def _run(config_file: Path, *argv: str) -> None:
    cli.main(["--config", str(config_file), *argv])


def test_instantiate_generate_only(config_file, capsys, make_address) -> None:
    _run(
        config_file,
        "instantiate", "1", '{"count":0}',
        "--label", "local", "--no-admin", "--amount", "5stake,3stake",
        "--from", "me", "--generate-only",
    )

    tx = json.loads(capsys.readouterr().out)
    (message,) = tx["body"]["messages"]
    assert message["@type"] == "/cosmwasm.wasm.v1.MsgInstantiateContract"
    assert message["sender"] == make_address(1)
    assert message["code_id"] == "1"
    assert message["funds"] == [{"denom": "stake", "amount": "8"}]


def test_instantiate_alias_and_admin_key(config_file, capsys, make_address) -> None:
    _run(
        config_file,
        "init", "1", "{}", "--label", "local", "--admin", "ops",
        "--from", "me", "--generate-only",
    )

    (message,) = json.loads(capsys.readouterr().out)["body"]["messages"]
    assert message["admin"] == make_address(9)


def test_missing_label_exits_with_error(config_file, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        _run(config_file, "instantiate", "1", "{}", "--no-admin", "--from", "me", "--generate-only")

    assert excinfo.value.code == 1
    assert "label is required on all contracts" in capsys.readouterr().err


def test_instantiate2_with_ascii_salt(config_file, capsys) -> None:
    _run(
        config_file,
        "instantiate2", "1", "{}", "salty", "--ascii", "--fix-msg",
        "--label", "local", "--no-admin", "--from", "me", "--generate-only",
    )

    (message,) = json.loads(capsys.readouterr().out)["body"]["messages"]
    assert message["salt"] == "c2FsdHk="
    assert message["fix_msg"] is True


def test_execute_validates_contract_before_submit(config_file, capsys) -> None:
    with pytest.raises(SystemExit):
        _run(config_file, "execute", "not-a-contract", "{}", "--from", "me", "--generate-only")

    assert "contract" in capsys.readouterr().err


def test_grant_contract_requires_expiration(config_file, capsys, make_address) -> None:
    with pytest.raises(SystemExit) as excinfo:
        _run(
            config_file,
            "grant", "contract", make_address(2), "execution", make_address(7),
            "--max-calls", "5", "--no-token-transfer", "--allow-all-messages",
            "--from", "me", "--generate-only",
        )

    assert excinfo.value.code == 1
    assert "expiration must be set" in capsys.readouterr().err


def test_grant_contract_with_message_keys(config_file, capsys, make_address) -> None:
    _run(
        config_file,
        "grant", "contract", make_address(2), "execution", make_address(7),
        "--max-funds", "100uwasm", "--max-calls", "5",
        "--allow-msg-keys", "inc,reset", "--allow-msg-keys", "noop",
        "--expiration", "1667979596",
        "--from", "me", "--generate-only",
    )

    (message,) = json.loads(capsys.readouterr().out)["body"]["messages"]
    grant = message["grant"]["authorization"]["grants"][0]
    assert grant["limit"]["@type"] == "/cosmwasm.wasm.v1.CombinedLimit"
    assert grant["filter"]["keys"] == ["inc", "reset", "noop"]
    assert message["grant"]["expiration"] == "2022-11-09T07:39:56Z"


def test_grant_store_code_rejects_duplicates_before_submit(config_file, capsys, make_address) -> None:
    with pytest.raises(SystemExit):
        _run(
            config_file,
            "grant", "store-code", make_address(2), "abc:*", "abc:nobody",
            "--from", "me", "--generate-only",
        )

    assert "duplicate grant" in capsys.readouterr().err


def test_store_upload(config_file, capsys, tmp_path, make_address) -> None:
    wasm = tmp_path / "contract.wasm"
    wasm.write_bytes(b"\x00asm\x01\x00\x00\x00")

    _run(
        config_file,
        "store", str(wasm), "--instantiate-anyof-addresses", make_address(3),
        "--from", "me", "--generate-only",
    )

    (message,) = json.loads(capsys.readouterr().out)["body"]["messages"]
    assert message["instantiate_permission"] == {
        "permission": "ACCESS_TYPE_ANY_OF_ADDRESSES",
        "addresses": [make_address(3)],
    }


def test_submit_through_signer(config_file, capsys, monkeypatch, make_address) -> None:
    StubSigner.instances.clear()
    monkeypatch.setattr(cli, "SignerRPCClient", StubSigner)

    _run(
        config_file,
        "execute", make_address(7), '{"inc":{}}', "--amount", "1uwasm",
        "--from", "me", "--chain-id", "testing", "--fees", "500uwasm", "--memo", "note",
    )

    assert json.loads(capsys.readouterr().out) == {"txhash": "ABC", "code": 0}
    (signer,) = StubSigner.instances
    assert signer.endpoint == "http://signer.test"
    ((messages, options),) = signer.submitted
    assert messages[0].contract == make_address(7)
    assert options.chain_id == "testing"
    assert options.signer == "me"
    assert options.memo == "note"
    assert str(options.fees) == "500uwasm"


def test_submit_requires_chain_id(config_file, capsys, make_address) -> None:
    with pytest.raises(SystemExit):
        _run(config_file, "clear-admin", make_address(7), "--from", "me")

    assert "--chain-id is required" in capsys.readouterr().err


def test_from_is_required(config_file, capsys, make_address) -> None:
    with pytest.raises(SystemExit):
        _run(config_file, "clear-admin", make_address(7), "--generate-only")

    assert "--from is required" in capsys.readouterr().err
