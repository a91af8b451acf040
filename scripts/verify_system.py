#!/usr/bin/env python3
"""Quick verification script for a configured deployment.

Checks configuration, the encryption service, the chain connection and
(in dry-run mode) runs one swap and one balance reveal end to end.
"""

import asyncio
import sys

# Colors for output
GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
RESET = "\033[0m"
CHECK = "✓"
CROSS = "✗"
WARN = "⚠"


def print_status(name: str, success: bool, message: str = ""):
    """Print status with color."""
    if success:
        print(f"  {GREEN}{CHECK}{RESET} {name}" + (f" - {message}" if message else ""))
    else:
        print(f"  {RED}{CROSS}{RESET} {name}" + (f" - {message}" if message else ""))


def print_warning(name: str, message: str = ""):
    """Print warning."""
    print(f"  {YELLOW}{WARN}{RESET} {name}" + (f" - {message}" if message else ""))


def check_config():
    """Check settings and token contracts."""
    print("\n⚙️  Checking Configuration...")

    from confswap.assets import AssetId, get_contract_address
    from confswap.config import get_settings

    settings = get_settings()
    print_status("Settings loaded", True, f"environment={settings.environment}")

    if settings.dry_run:
        print_warning("Dry run", "encryption and transactions are simulated")

    ok = True
    for asset in AssetId:
        address = get_contract_address(asset, settings)
        if address:
            print_status(f"{asset.value} contract", True, address)
        else:
            print_status(f"{asset.value} contract", False, "not configured")
            ok = False
    return ok


async def check_encryption(session):
    """Check that the encryption service answers."""
    print("\n🔐 Checking Encryption Service...")

    reachable = await session.encryption.health_check()
    print_status(session.encryption.name, reachable, "reachable" if reachable else "unreachable")
    return reachable


async def check_chain(session):
    """Check the chain connection and network."""
    print("\n⛓️  Checking Chain...")

    await session.start()
    context = session.context
    print_status("Account", context.is_connected, context.account or "not configured")
    print_status(
        "Network",
        context.is_expected_network,
        f"chain {context.chain_id}, expected {context.expected_chain_id} ({context.network_name})",
    )
    return context.is_connected and context.is_expected_network


async def check_dry_run_swap(session):
    """Run one simulated swap and one balance reveal."""
    print("\n🔄 Testing Dry-Run Swap...")

    from confswap.swap.models import Phase, SwapIntent

    execution = session.orchestrator.submit(SwapIntent.create("DGOLD", "USDT", "2"))
    print_status("Quote", True, f"2 DGOLD -> {execution.quote.output_amount} USDT")

    await session.orchestrator.wait(execution)
    confirmed = execution.phase == Phase.CONFIRMED
    print_status("Swap", confirmed, execution.tx_hash or execution.phase.value)

    view = await session.decryptor.decrypt("DGOLD")
    print_status("Balance reveal", view.is_revealed, f"DGOLD: {view.plaintext}")

    session.orchestrator.reset()
    return confirmed and view.is_revealed


async def main():
    """Run all verification checks."""
    print("=" * 60)
    print("     CONFSWAP SYSTEM VERIFICATION")
    print("=" * 60)

    from confswap.session import create_session

    results = {}

    results["config"] = check_config()
    session = create_session()
    results["encryption"] = await check_encryption(session)
    results["chain"] = await check_chain(session)
    if session.settings.dry_run and results["chain"]:
        results["dry_run_swap"] = await check_dry_run_swap(session)

    # Summary
    print("\n" + "=" * 60)
    print("     SUMMARY")
    print("=" * 60)

    passed = sum(1 for v in results.values() if v)
    total = len(results)

    for name, success in results.items():
        status = f"{GREEN}{CHECK}{RESET}" if success else f"{RED}{CROSS}{RESET}"
        print(f"  {status} {name.replace('_', ' ').title()}")

    print()
    if passed == total:
        print(f"  {GREEN}All {total} checks passed!{RESET}")
        return 0
    else:
        print(f"  {YELLOW}{passed}/{total} checks passed{RESET}")
        return 1


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
