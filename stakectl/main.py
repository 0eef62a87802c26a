# MIT License
# Copyright (c) 2025 Hashborn

import argparse
import sys
import json
import os
import time
from decimal import Decimal, InvalidOperation, localcontext
import requests
from stakeproto.types.common import OpType
from stakeproto.config.params import DECIMALS, DENOM

DEFAULT_NODE = "http://localhost:8000"

def get_node_url(args):
    return args.node or os.environ.get("STAKE_NODE", DEFAULT_NODE)

def to_units(amount: str) -> int:
    try:
        with localcontext() as ctx:
            ctx.prec = 100
            units = Decimal(amount) * 10**DECIMALS
    except InvalidOperation:
        units = None
    if units is None or not units.is_finite():
        print(f"Error: invalid amount '{amount}'")
        sys.exit(1)
    if units != units.to_integral_value():
        print(f"Error: amount '{amount}' is finer than 1e-{DECIMALS} {DENOM}")
        sys.exit(1)
    return int(units)

def fmt_units(raw) -> str:
    return f"{Decimal(int(raw)) / 10**DECIMALS} {DENOM}"

def amount_from_args(args) -> int:
    return int(args.amount) if args.raw else to_units(args.amount)

def get_json(url: str):
    try:
        resp = requests.get(url)
    except requests.RequestException as e:
        print(f"Connection error: {e}")
        sys.exit(1)
    if resp.status_code != 200:
        print(f"Error: {resp.text}")
        sys.exit(1)
    return resp.json()

# --- Query Commands ---
def cmd_query_status(args):
    data = get_json(f"{get_node_url(args)}/status")
    print(f"Token:         {data['name']} ({data['symbol']})")
    print(f"Owner:         {data['owner']}")
    print(f"Total supply:  {fmt_units(data['total_supply'])}")
    print(f"Total stakes:  {fmt_units(data['total_stakes'])}")
    print(f"Total rewards: {fmt_units(data['total_rewards'])}")
    print(f"Stakeholders:  {data['stakeholders']}")

def cmd_query_account(args):
    data = get_json(f"{get_node_url(args)}/account/{args.address}")
    print(f"Balance: {fmt_units(data['balance'])}")
    print(f"Stake:   {fmt_units(data['stake'])}")
    print(f"Reward:  {fmt_units(data['reward'])} (next pass: +{fmt_units(data['next_reward'])})")
    if data["is_stakeholder"]:
        print(f"Stakeholder #{data['stakeholder_index']}")

def cmd_query_stakeholders(args):
    data = get_json(f"{get_node_url(args)}/stakeholders")
    if not data["stakeholders"]:
        print("No stakeholders.")
        return
    print(f"{'Address':<45} {'Stake':>30}")
    print("-" * 76)
    for s in data["stakeholders"]:
        print(f"{s['address']:<45} {fmt_units(s['stake']):>30}")

def cmd_query_ops(args):
    receipts = get_json(f"{get_node_url(args)}/operations?limit={args.limit}")
    for r in receipts:
        line = f"#{r['seq']:<6} {r['op_type']:<20} {r['status']:<8} {r['caller']}"
        if r["error"]:
            line += f"  ({r['error_code']}: {r['error']})"
        print(line)

# --- Operation Commands ---
def send_op(url, op: dict):
    try:
        resp = requests.post(f"{url}/op/send", json=op)
    except requests.RequestException as e:
        print(f"Connection error: {e}")
        sys.exit(1)
    if resp.status_code == 200:
        res = resp.json()
        print(f"Success! Seq: {res['seq']}")
        if res["minted"] != "0":
            print(f"Minted: {fmt_units(res['minted'])}")
        if res["burned"] != "0":
            print(f"Burned: {fmt_units(res['burned'])}")
        if res["details"]:
            print(json.dumps(res["details"], indent=2))
    else:
        print(f"Rejected: {resp.text}")
        sys.exit(1)

def build_op(op_type: OpType, caller: str, amount: int = 0, to_address: str = None) -> dict:
    return {
        "op_type": op_type.value,
        "caller": caller,
        "amount": amount,
        "to_address": to_address,
        "timestamp": int(time.time()),
    }

def cmd_op_transfer(args):
    amount = amount_from_args(args)
    print(f"Sending {args.amount} {DENOM} to {args.to_address}...")
    send_op(get_node_url(args), build_op(OpType.TRANSFER, args.from_address, amount, args.to_address))

def cmd_op_stake(args):
    amount = amount_from_args(args)
    print(f"Staking {args.amount} {DENOM} from {args.from_address}...")
    send_op(get_node_url(args), build_op(OpType.CREATE_STAKE, args.from_address, amount))

def cmd_op_unstake(args):
    amount = amount_from_args(args)
    print(f"Unstaking {args.amount} {DENOM} for {args.from_address}...")
    send_op(get_node_url(args), build_op(OpType.REMOVE_STAKE, args.from_address, amount))

def cmd_op_distribute(args):
    print("Distributing rewards...")
    send_op(get_node_url(args), build_op(OpType.DISTRIBUTE_REWARDS, args.from_address))

def cmd_op_withdraw(args):
    print(f"Withdrawing rewards of {args.from_address}...")
    send_op(get_node_url(args), build_op(OpType.WITHDRAW_REWARD, args.from_address))

def main():
    parser = argparse.ArgumentParser(prog="stakectl", description="StakeLedger Client CLI")
    parser.add_argument("--node", help="Node URL (default: http://localhost:8000)")

    subparsers = parser.add_subparsers(dest="command", help="Sub-commands")

    # query
    p_query = subparsers.add_parser("query", help="Query ledger state")
    sp_query = p_query.add_subparsers(dest="subcommand")

    sp_query.add_parser("status", help="Token and staking totals")
    pq_acc = sp_query.add_parser("account", help="Balance, stake and reward of an account")
    pq_acc.add_argument("address", help="Account address")
    sp_query.add_parser("stakeholders", help="List stakeholders")
    pq_ops = sp_query.add_parser("ops", help="Recent operations")
    pq_ops.add_argument("--limit", type=int, default=20)

    # op
    p_op = subparsers.add_parser("op", help="Submit operations")
    sp_op = p_op.add_subparsers(dest="subcommand")

    po_send = sp_op.add_parser("transfer", help=f"Send {DENOM} tokens")
    po_send.add_argument("to_address", help="Recipient address")
    po_send.add_argument("amount", help=f"Amount in {DENOM}")

    po_stake = sp_op.add_parser("stake", help="Lock tokens into stake")
    po_stake.add_argument("amount", help=f"Amount in {DENOM}")

    po_unstake = sp_op.add_parser("unstake", help="Return stake to liquid balance")
    po_unstake.add_argument("amount", help=f"Amount in {DENOM}")

    po_dist = sp_op.add_parser("distribute", help="Credit rewards to all stakeholders (owner only)")
    po_withdraw = sp_op.add_parser("withdraw", help="Mint accrued rewards into balance")

    for p in (po_send, po_stake, po_unstake, po_dist, po_withdraw):
        p.add_argument("--from", dest="from_address", required=True, help="Caller address")
    for p in (po_send, po_stake, po_unstake):
        p.add_argument("--raw", action="store_true", help="Amount is in minimal units")

    args = parser.parse_args()

    if args.command == "query":
        if args.subcommand == "status": cmd_query_status(args)
        elif args.subcommand == "account": cmd_query_account(args)
        elif args.subcommand == "stakeholders": cmd_query_stakeholders(args)
        elif args.subcommand == "ops": cmd_query_ops(args)
        else: p_query.print_help()

    elif args.command == "op":
        if args.subcommand == "transfer": cmd_op_transfer(args)
        elif args.subcommand == "stake": cmd_op_stake(args)
        elif args.subcommand == "unstake": cmd_op_unstake(args)
        elif args.subcommand == "distribute": cmd_op_distribute(args)
        elif args.subcommand == "withdraw": cmd_op_withdraw(args)
        else: p_op.print_help()

    else:
        parser.print_help()

if __name__ == "__main__":
    main()
