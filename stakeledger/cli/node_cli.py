import argparse
import os
import sys
import json
import logging
from decimal import Decimal, InvalidOperation
from stakeproto.config.params import CURRENT_NETWORK, DECIMALS, DENOM
from ..core.staking import StakingToken
from ..rpc.api import start_rpc_server

logger = logging.getLogger(__name__)

def to_units(amount: str) -> int:
    """'1.5' -> 1.5 * 10**DECIMALS minimal units."""
    try:
        return int(Decimal(amount) * 10**DECIMALS)
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {amount}")

def cmd_init(args):
    """Initialize node: data dir and genesis.json."""
    data_dir = args.datadir
    os.makedirs(data_dir, exist_ok=True)

    genesis_path = os.path.join(data_dir, "genesis.json")
    if os.path.exists(genesis_path):
        print(f"Genesis already exists at {genesis_path}")
        return

    if args.supply is not None:
        supply = to_units(args.supply)
    else:
        supply = CURRENT_NETWORK.initial_supply

    genesis_data = {
        "owner": args.owner,
        "alloc": {
            args.owner: str(supply)
        }
    }
    with open(genesis_path, "w") as f:
        f.write(json.dumps(genesis_data, indent=2))

    print(f"Genesis written to {genesis_path}")
    print(f"Owner: {args.owner}")
    print(f"Initial supply: {Decimal(supply) / 10**DECIMALS} {DENOM}")
    print(f"\nNode initialized in {data_dir}")

def cmd_run(args):
    data_dir = args.datadir
    db_path = os.path.join(data_dir, "ledger.db")

    if not os.path.exists(os.path.join(data_dir, "genesis.json")) and not os.path.exists(db_path):
        logger.error(f"No genesis found in {data_dir}. Run 'init' first.")
        sys.exit(1)

    print(f"Starting StakeLedger node...")
    print(f"Data DB: {db_path}")
    print(f"RPC: {args.host}:{args.port}")

    ledger = StakingToken(db_path)
    try:
        start_rpc_server(ledger, host=args.host, port=args.port)
    except KeyboardInterrupt:
        pass
    finally:
        ledger.close()

def main():
    parser = argparse.ArgumentParser(description="StakeLedger Node CLI")
    parser.add_argument("--datadir", default="./.stakeledger", help="Data directory")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Init command
    init_parser = subparsers.add_parser("init", help="Write genesis configuration")
    init_parser.add_argument("--owner", required=True, help="Owner address (receives initial supply)")
    init_parser.add_argument("--supply", default=None, help=f"Initial supply in {DENOM} (default: network preset)")

    # Run command
    run_parser = subparsers.add_parser("run", help="Run the node")
    run_parser.add_argument("--host", default="0.0.0.0", help="RPC Host")
    run_parser.add_argument("--port", type=int, default=8000, help="RPC Port")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s %(levelname)s: %(message)s',
        datefmt='%H:%M:%S'
    )

    if args.command == "init":
        cmd_init(args)
    elif args.command == "run":
        cmd_run(args)

if __name__ == "__main__":
    main()
