"""
Tests for the command line entry point.
"""

import pytest
from unittest.mock import AsyncMock, patch

import cli
from swapflow.core.chain_types import NetworkId
from swapflow.core.flows import FlowResult
from swapflow.core.recovery import AttestationTimeoutError, LegFailedError


def test_parser_bridge_arguments():
    args = cli.build_parser().parse_args(["bridge", "solana", "aptos", "SOL", "APT", "1000", "--slippage", "1.5"])

    assert args.command == "bridge"
    assert args.source == "solana"
    assert args.target == "aptos"
    assert args.amount == "1000"
    assert args.slippage == 1.5


@pytest.mark.asyncio
async def test_no_command_prints_help():
    assert await cli.main([]) == 1


@pytest.mark.asyncio
async def test_successful_swap(capsys):
    result = FlowResult(flow="swap")
    result.record("swap", NetworkId.SOLANA, "5wapSig")

    with patch.object(cli, "cli_swap", AsyncMock(return_value=result)):
        code = await cli.main(["swap", "solana", "SOL", "USDC", "1000"])

    assert code == 0
    output = capsys.readouterr().out
    assert "5wapSig" in output
    assert "https://solscan.io/tx/5wapSig" in output


@pytest.mark.asyncio
async def test_failed_leg_suggests_redeem(capsys):
    completed = FlowResult(flow="cross_chain")
    completed.record("burn", NetworkId.POLYGON, "0xburn")
    error = LegFailedError(
        "attestation",
        AttestationTimeoutError("not attested"),
        last_tx_hash="0xburn",
        completed_legs=completed.legs,
    )

    with patch.object(cli, "cli_bridge", AsyncMock(side_effect=error)):
        code = await cli.main(["bridge", "polygon", "solana", "USDC", "USDC", "1000"])

    assert code == 1
    output = capsys.readouterr().out
    assert "burn: 0xburn" in output
    assert "redeem" in output
