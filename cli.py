#!/usr/bin/env python3
"""Command line for running swaps, CCTP bridges and redeems against the Kana API"""

import argparse
import asyncio
import sys
from typing import Optional

from swapflow.config import settings
from swapflow.core.attestation import AttestationPoller
from swapflow.core.chain_types import chain_name, explorer_url, normalize_network
from swapflow.core.flows import CrossChainFlow, FlowResult, RedeemFlow, SwapFlow
from swapflow.core.recovery import LegFailedError, RecoverableError, UnrecoverableError
from swapflow.logging_config import setup_logging
from swapflow.providers.circle import CircleAttestationProvider
from swapflow.providers.kana import KanaProvider


def print_result(result: FlowResult) -> None:
    """Pretty print the legs of a finished flow"""
    print(f"\n✅ {result.flow} complete")
    print("=" * 50)
    for index, leg in enumerate(result.legs, 1):
        print(f"{index}. {leg.leg:<12} {chain_name(leg.network):<10} {leg.tx_hash}")
        print(f"   {explorer_url(leg.network, leg.tx_hash)}")


def print_failure(error: Exception) -> None:
    if isinstance(error, LegFailedError):
        print(f"\n❌ {error.leg} failed: {error.cause}")
        if error.completed_legs:
            print("\nCompleted before the failure:")
            for leg in error.completed_legs:
                print(f" - {leg.leg}: {leg.tx_hash}")
        if error.last_tx_hash:
            print(f"\nLast successful tx: {error.last_tx_hash}")
            if error.leg in ("attestation", "mint"):
                print("Resume with: cli.py redeem <source> <target> <burn tx hash>")
        return

    print(f"\n❌ Error: {error}")
    if getattr(error, "context", None) and error.context.suggested_action:
        print(f"   {error.context.suggested_action}")


def build_poller(poll_interval: Optional[float] = None, max_polls: Optional[int] = None) -> AttestationPoller:
    return AttestationPoller(
        CircleAttestationProvider(),
        poll_interval_seconds=poll_interval or settings.attestation_poll_interval_seconds,
        max_polls=max_polls or settings.attestation_max_polls,
    )


async def cli_swap(args) -> FlowResult:
    network = normalize_network(args.network)
    print(f"🔄 Swapping {args.amount} {args.input_token} -> {args.output_token} on {chain_name(network)}...")
    async with KanaProvider() as kana, SwapFlow(kana) as flow:
        return await flow.run(
            network,
            args.input_token,
            args.output_token,
            args.amount,
            slippage=args.slippage,
            recipient=args.recipient,
            swap_mode=args.swap_mode,
        )


async def cli_bridge(args) -> FlowResult:
    source = normalize_network(args.source)
    target = normalize_network(args.target)
    print(f"🌉 Bridging {chain_name(source)} -> {chain_name(target)} via CCTP...")
    poller = build_poller()
    async with KanaProvider() as kana, CrossChainFlow(kana, poller) as flow:
        try:
            return await flow.run(
                source,
                target,
                args.source_token,
                args.target_token,
                args.amount,
                slippage=args.slippage,
            )
        finally:
            await poller.provider.close()


async def cli_redeem(args) -> FlowResult:
    source = normalize_network(args.source)
    target = normalize_network(args.target)
    print(f"📥 Redeeming {chain_name(source)} burn {args.burn_tx_hash} on {chain_name(target)}...")
    poller = build_poller()
    async with KanaProvider() as kana, RedeemFlow(kana, poller) as flow:
        try:
            return await flow.run(source, target, args.burn_tx_hash)
        finally:
            await poller.provider.close()


async def cli_attestation(args) -> None:
    source = normalize_network(args.source)
    print(f"⏳ Polling attestation for {chain_name(source)} burn {args.burn_tx_hash}...")
    poller = build_poller(args.interval, args.max_polls)
    try:
        record = await poller.await_attestation(source, args.burn_tx_hash)
    finally:
        await poller.provider.close()
    print("\n🟢 Attestation ready")
    print(f"messageBytes:         {record.message_bytes}")
    print(f"attestationSignature: {record.attestation_signature}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Kana swap / CCTP bridge CLI")
    parser.add_argument("--log-level", help="Override LOG_LEVEL")
    parser.add_argument("--log-format", choices=["auto", "json", "console"], help="Override LOG_FORMAT")
    subparsers = parser.add_subparsers(dest="command")

    swap_parser = subparsers.add_parser("swap", help="Same-chain swap")
    swap_parser.add_argument("network", help="Chain name or Kana network id")
    swap_parser.add_argument("input_token", help="Input token address")
    swap_parser.add_argument("output_token", help="Output token address")
    swap_parser.add_argument("amount", help="Amount in smallest units")
    swap_parser.add_argument("--slippage", type=float, help="Slippage percent (default from settings)")
    swap_parser.add_argument("--recipient", help="Send the output to another address")
    swap_parser.add_argument("--swap-mode", choices=["exactIn", "exactOut"], help="Quote mode")

    bridge_parser = subparsers.add_parser("bridge", help="Cross-chain swap over CCTP")
    bridge_parser.add_argument("source", help="Source chain")
    bridge_parser.add_argument("target", help="Target chain")
    bridge_parser.add_argument("source_token", help="Token spent on the source chain")
    bridge_parser.add_argument("target_token", help="Token received on the target chain")
    bridge_parser.add_argument("amount", help="Amount in smallest units")
    bridge_parser.add_argument("--slippage", type=float, help="Slippage percent (default from settings)")

    redeem_parser = subparsers.add_parser("redeem", help="Mint on the target chain for an existing burn")
    redeem_parser.add_argument("source", help="Chain the burn happened on")
    redeem_parser.add_argument("target", help="Chain to mint on")
    redeem_parser.add_argument("burn_tx_hash", help="Burn transaction hash")

    attestation_parser = subparsers.add_parser("attestation", help="Wait for a CCTP attestation")
    attestation_parser.add_argument("source", help="Chain the burn happened on")
    attestation_parser.add_argument("burn_tx_hash", help="Burn transaction hash")
    attestation_parser.add_argument("--interval", type=float, help="Seconds between lookups")
    attestation_parser.add_argument("--max-polls", type=int, help="Lookups before giving up")

    return parser


async def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.log_level, args.log_format)
    command = args.command.lower()

    try:
        if command == "swap":
            print_result(await cli_swap(args))
        elif command == "bridge":
            print_result(await cli_bridge(args))
        elif command == "redeem":
            print_result(await cli_redeem(args))
        elif command == "attestation":
            await cli_attestation(args)
        else:
            print(f"❌ Unknown command: {command}")
            parser.print_help()
            return 1
    except (RecoverableError, UnrecoverableError, ValueError) as e:
        print_failure(e)
        return 1

    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
