import logging
from unittest.mock import AsyncMock, patch

import pytest
from eth_utils import to_checksum_address
from typer.testing import CliRunner

from mintscan.domain.errors import RPCError
from mintscan.domain.models import RawBlock
from mintscan.presentation.cli import app

from conftest import RECEIVER, make_tx, mint_input

runner = CliRunner()


@pytest.fixture
def patched_rpc(rpc):
    with patch("mintscan.presentation.cli.HttpxRPC", return_value=rpc) as factory:
        yield rpc, factory


def test_decode_mint_input():
    result = runner.invoke(app, ["decode", "0x" + mint_input(RECEIVER, 2_000_000).hex()])
    assert result.exit_code == 0
    assert f"Mint - Receiver: {to_checksum_address(RECEIVER)}, Amount: 2.000000" in result.output

def test_decode_unknown_selector():
    result = runner.invoke(app, ["decode", "0xa9059cbb" + "00" * 64])
    assert result.exit_code == 1
    assert "unknown selector 0xa9059cbb" in result.output

def test_signatures_lists_registry():
    result = runner.invoke(app, ["signatures"])
    assert result.exit_code == 0
    assert "0x40c10f19" in result.output
    assert "depositToken1Distribution" in result.output
    assert "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef" in result.output

def test_scan_prints_audit_trail(patched_rpc, contract1):
    rpc, factory = patched_rpc
    async def get_block(n, full_transactions=True):
        txs = (make_tx(1, contract1, mint_input(RECEIVER, 2_000_000)),) if n == 100 else ()
        return RawBlock(number=n, transactions=txs)
    rpc.get_block.side_effect = get_block

    result = runner.invoke(app, ["scan", "--rpc", "http://node.test", "--from-block", "99", "--pace", "0"])
    assert result.exit_code == 0, result.output
    assert factory.call_args.args[0] == "http://node.test"
    assert "Searching from block 99 to 100" in result.output
    assert f"Mint - Receiver: {to_checksum_address(RECEIVER)}, Amount: 2.000000" in result.output
    assert [c.args[0] for c in rpc.get_block.call_args_list] == [100, 99]
    rpc.aclose.assert_awaited_once()

def test_scan_rpc_url_from_environment(patched_rpc):
    rpc, factory = patched_rpc
    result = runner.invoke(app, ["scan", "--from-block", "100", "--pace", "0"],
                           env={"MINTSCAN_RPC_URL": "http://env.test"})
    assert result.exit_code == 0, result.output
    assert factory.call_args.args[0] == "http://env.test"

def test_scan_head_unreachable(patched_rpc):
    rpc, _ = patched_rpc
    rpc.latest_block = AsyncMock(side_effect=RPCError("eth_blockNumber transport error"))
    result = runner.invoke(app, ["scan", "--pace", "0"])
    assert result.exit_code == 1
    assert "transport error" in result.output
    rpc.aclose.assert_awaited_once()

def test_scan_rejects_bad_contract_rule(patched_rpc):
    result = runner.invoke(app, ["scan", "--contract", "0x1234:0x40c10f19"])
    assert result.exit_code == 2
    assert "bad contract rule" in result.output

def test_scan_rejects_unregistered_selector(patched_rpc, contract1):
    result = runner.invoke(app, ["scan", "--contract", f"{contract1}:0xdeadbeef:other"])
    assert result.exit_code == 2
    assert "no signature registered" in result.output

def test_scan_rejects_inverted_range(patched_rpc):
    result = runner.invoke(app, ["scan", "--from-block", "200", "--to-block", "150", "--pace", "0"])
    assert result.exit_code == 2

def test_scan_logs_under_module_logger(patched_rpc, caplog):
    with caplog.at_level(logging.INFO, logger="mintscan"):
        result = runner.invoke(app, ["scan", "--from-block", "100", "--pace", "0"])
    assert result.exit_code == 0, result.output
    assert any(r.name == "mintscan.presentation.cli" and r.getMessage().startswith("head=")
               for r in caplog.records)
