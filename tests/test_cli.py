from unittest.mock import MagicMock, patch

from pingload.cli import main
from pingload.keys import PrivateKey, to_checksum_address
from pingload.wallets import generate_wallets, load_wallets, save_wallets

ADDRESS = to_checksum_address("0x" + "ab" * 20)


def rpc_session(results):
    session_cls = MagicMock()
    methods = []

    def post(url, json, timeout):
        methods.append(json["method"])
        response = MagicMock()
        response.json.return_value = {"jsonrpc": "2.0", "id": json["id"], "result": results[json["method"]]}
        return response

    session_cls.return_value.post.side_effect = post
    return session_cls, methods


def write_config(tmp_path, root_key_hex="placeholder"):
    path = tmp_path / "config.yaml"
    path.write_text(
        "rpc_url: http://localhost:8545\n"
        f"ping_address: '{ADDRESS}'\n"
        f"root_private_key: '{root_key_hex}'\n"
        "eth_send_amount: 1000\n",
        encoding="utf-8",
    )
    return str(path)


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "generate-wallets" in capsys.readouterr().out


def test_missing_config_fails(tmp_path, capsys):
    code = main(["--config", str(tmp_path / "absent.yaml"), "generate-wallets"])
    assert code == 1
    assert "failed to load config" in capsys.readouterr().err


def test_generate_wallets_command(tmp_path, capsys):
    session_cls, _ = rpc_session({"eth_chainId": "0x1"})
    out_path = str(tmp_path / "wallets.json")
    with patch("requests.Session", session_cls):
        code = main(["--config", write_config(tmp_path), "generate-wallets", "--count", "2", "--wallets", out_path])
    assert code == 0
    assert len(load_wallets(out_path)) == 2
    assert f"2 wallets saved to {out_path}" in capsys.readouterr().out


def test_fund_wallets_command(tmp_path, capsys):
    root_key = PrivateKey.generate()
    wallets_path = str(tmp_path / "wallets.json")
    save_wallets(generate_wallets(2), wallets_path)
    session_cls, methods = rpc_session(
        {
            "eth_chainId": "0x1",
            "eth_getTransactionCount": "0x0",
            "eth_maxPriorityFeePerGas": "0x1",
            "eth_getBlockByNumber": {"baseFeePerGas": "0x7"},
            "eth_estimateGas": "0x5208",
            "eth_sendRawTransaction": "0x" + "00" * 32,
        }
    )
    with patch("requests.Session", session_cls):
        code = main(["--config", write_config(tmp_path, root_key.to_hex()), "fund-wallets", "--wallets", wallets_path])
    assert code == 0
    assert "Transaction sent: 0x" in capsys.readouterr().out
    assert methods[-1] == "eth_sendRawTransaction"


def test_fund_wallets_missing_file_fails(tmp_path, capsys):
    session_cls, _ = rpc_session({"eth_chainId": "0x1"})
    with patch("requests.Session", session_cls):
        code = main(["--config", write_config(tmp_path), "fund-wallets", "--wallets", str(tmp_path / "none.json")])
    assert code == 1
    assert "none.json" in capsys.readouterr().err