"""
Command line interface for the StakeFlow SDK.

Usage:
    stakeflow approve --amount 1000 --keystore ~/.keys/staker.json
    stakeflow claim-bounty --bounty-id 2 --private-key-env STAKER_KEY
"""
import argparse
import getpass
import logging
import os
import sys
from typing import List, Optional

from .client import StakeFlowClient
from .exceptions import StakeFlowError
from .models import ConfirmationStatus
from .signer import LocalSigner
from .version import __version__

logger = logging.getLogger("stakeflow")

PASSWORD_ENV = "STAKEFLOW_PASSWORD"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stakeflow", description="Staking account actions")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--network", default=os.environ.get("STAKEFLOW_NETWORK", "local"),
                        help="Network name from networks.json (default: local)")
    parser.add_argument("--rpc-url", help="Override the network RPC URL")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    keys = parser.add_mutually_exclusive_group(required=True)
    keys.add_argument("--keystore", help="Path to a V3 keystore file; password from "
                                         f"${PASSWORD_ENV} or prompt")
    keys.add_argument("--private-key-env", help="Environment variable holding the private key")

    sub = parser.add_subparsers(dest="command", required=True)

    approve = sub.add_parser("approve", help="Approve the StakeManager if the allowance is short")
    approve.add_argument("--amount", type=int, required=True, help="Amount in token base units")
    approve.add_argument("--wait", action="store_true", help="Wait for the approval to be mined")

    claim = sub.add_parser("claim-bounty", help="Redeem a bounty once its lock expires")
    claim.add_argument("--bounty-id", type=int, required=True)
    claim.add_argument("--no-wait", action="store_true", help="Do not wait for the redeem to be mined")

    return parser


def _load_signer(args: argparse.Namespace) -> LocalSigner:
    if args.keystore:
        password = os.environ.get(PASSWORD_ENV) or getpass.getpass("Keystore password: ")
        return LocalSigner.from_keystore(args.keystore, password)

    signer = LocalSigner.from_env(args.private_key_env)
    if signer is None:
        raise ValueError(f"Environment variable {args.private_key_env} is not set")
    return signer


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - [%(levelname)s] - %(name)s - %(message)s"
    )

    try:
        signer = _load_signer(args)
    except (OSError, ValueError) as e:
        logger.error(f"Could not load signer: {e}")
        return 1

    try:
        client = StakeFlowClient.from_network(args.network, rpc_url=args.rpc_url, signer=signer)

        if args.command == "approve":
            outcome = client.approve(args.amount, wait_for_confirmation=args.wait)
            if outcome.is_noop:
                print("Allowance already sufficient, nothing sent")
                return 0
            print(outcome.tx_hash)
            if outcome.status == ConfirmationStatus.FAILED:
                logger.error("approve transaction failed on-chain")
                return 1
        else:
            outcome = client.claim_bounty(args.bounty_id, wait_for_confirmation=not args.no_wait)
            if outcome.is_noop:
                logger.error(f"Bounty {args.bounty_id} was not redeemed: {outcome.error}")
                return 1
            print(outcome.tx_hash)
            if outcome.status == ConfirmationStatus.FAILED:
                logger.error("redeemBounty transaction failed on-chain")
                return 1
    except StakeFlowError as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
