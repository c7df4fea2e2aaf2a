#!/usr/bin/env python3
"""
Approve or reject a pending withdrawal from the command line.

Usage:
    python scripts/process_withdrawal.py approve 42 --admin-id 1
    python scripts/process_withdrawal.py reject 42 --reason "Wrong network"
"""

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger  # noqa: E402

from app.config.database import async_session_maker, engine  # noqa: E402
from app.services.payout import BinancePayoutClient  # noqa: E402
from app.services.withdrawal_service import WithdrawalService  # noqa: E402
from app.utils.exceptions import PlatformError  # noqa: E402

logger.remove()
logger.add(sys.stderr, level="INFO")


async def process(
    command: str,
    withdrawal_id: int,
    admin_id: int | None,
    reason: str | None,
) -> int:
    payout_client = BinancePayoutClient()
    try:
        async with async_session_maker() as session:
            service = WithdrawalService(session, payout_client=payout_client)
            if command == "approve":
                withdrawal = await service.approve_withdrawal(
                    withdrawal_id, admin_id=admin_id
                )
            else:
                withdrawal = await service.reject_withdrawal(
                    withdrawal_id, reason=reason, admin_id=admin_id
                )
    except PlatformError as e:
        print(f"❌ {e}")
        return 1
    finally:
        await payout_client.close()
        await engine.dispose()

    print(f"Withdrawal {withdrawal.id}: {withdrawal.status}")
    if withdrawal.tx_id:
        print(f"  Payout id: {withdrawal.tx_id}")
    if withdrawal.note:
        print(f"  Note: {withdrawal.note}")
    return 0 if withdrawal.status != "failed" else 2


def main() -> None:
    parser = argparse.ArgumentParser(description="Process a pending withdrawal")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    approve_parser = subparsers.add_parser("approve", help="Approve and pay out")
    approve_parser.add_argument("withdrawal_id", type=int)
    approve_parser.add_argument("--admin-id", type=int, default=None)

    reject_parser = subparsers.add_parser("reject", help="Reject without payout")
    reject_parser.add_argument("withdrawal_id", type=int)
    reject_parser.add_argument("--reason", default=None, help="Note stored on the withdrawal")
    reject_parser.add_argument("--admin-id", type=int, default=None)

    args = parser.parse_args()
    if args.command not in ("approve", "reject"):
        parser.print_help()
        sys.exit(1)

    sys.exit(
        asyncio.run(
            process(
                args.command,
                args.withdrawal_id,
                args.admin_id,
                getattr(args, "reason", None),
            )
        )
    )


if __name__ == "__main__":
    main()
