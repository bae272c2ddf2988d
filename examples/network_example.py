#!/usr/bin/env python3
"""
Example of using StakeFlowClient with network configuration.
"""
import logging
import os

from stakeflow_sdk import (
    StakeFlowClient,
    NetworkConfig,
    LocalSigner,
    StakeFlowError,
    ConfirmationStatus
)


def main():
    """
    Demonstrate approving and claiming with network-based configuration.

    This example shows how to:
    1. Initialize the client from a network configuration
    2. Approve the StakeManager only if the allowance is short
    3. Inspect a bounty lock before claiming
    4. Claim the bounty, waiting for its lock to expire if needed
    """
    logging.basicConfig(level=logging.INFO)

    PRIVATE_KEY = os.environ.get("PRIVATE_KEY")
    NETWORK = os.environ.get("STAKEFLOW_NETWORK", "local")
    BOUNTY_ID = int(os.environ.get("BOUNTY_ID", "1"))
    AMOUNT = int(os.environ.get("STAKE_AMOUNT", str(1000 * 10**18)))

    if not PRIVATE_KEY:
        print("ERROR: PRIVATE_KEY environment variable is required")
        return

    print("Available networks:")
    for network_name in NetworkConfig.load_networks().keys():
        print(f"  - {network_name}")
    print()

    signer = LocalSigner(PRIVATE_KEY)
    print(f"Signer address: {signer.address}")

    client = StakeFlowClient.from_network(NETWORK, signer=signer)
    print(f"Connected to network: {NETWORK}")

    try:
        outcome = client.approve(AMOUNT, wait_for_confirmation=True)
        if outcome.is_noop:
            print("Allowance already sufficient")
        else:
            print(f"Approve transaction: {outcome.tx_hash} ({outcome.status.value})")

        lock = client.get_bounty_lock(BOUNTY_ID)
        print(f"Bounty {BOUNTY_ID}: amount={lock.amount} redeemable after epoch {lock.redeem_after}")
        print(f"Current epoch: {client.get_epoch()}")

        outcome = client.claim_bounty(BOUNTY_ID)
        if outcome.status == ConfirmationStatus.CONFIRMED:
            print(f"Bounty redeemed: {outcome.tx_hash}")
        else:
            print(f"Redeem transaction {outcome.tx_hash} failed on-chain")
    except StakeFlowError as e:
        print(f"ERROR: {e}")


if __name__ == "__main__":
    main()
