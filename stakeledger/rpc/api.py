from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from typing import Optional
from stakeproto.types.operation import Operation
from stakeproto.types.common import LedgerError, ProtocolError, Unauthorized
from ..core.staking import StakingToken
import logging

logger = logging.getLogger(__name__)

app = FastAPI(title="StakeLedger Node RPC")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
ledger: Optional[StakingToken] = None

def _require_ledger() -> StakingToken:
    if not ledger:
        raise HTTPException(status_code=503, detail="Node not initialized")
    return ledger

@app.get("/")
async def root():
    return {"message": "StakeLedger Node RPC", "version": "1.0"}

@app.get("/status")
async def get_status():
    node = _require_ledger()
    return {
        "network": node.config.network_id,
        "name": node.config.name,
        "symbol": node.config.symbol,
        "decimals": node.config.decimals,
        "owner": node.owner,
        "total_supply": str(node.total_supply()),
        "total_stakes": str(node.total_stakes()),
        "total_rewards": str(node.total_rewards()),
        "stakeholders": len(node.stakeholders()),
        "last_seq": node.seq,
    }

@app.get("/balance/{address}")
async def get_balance(address: str):
    node = _require_ledger()
    return {"address": address, "balance": str(node.balance_of(address))}

@app.get("/stake/{address}")
async def get_stake(address: str):
    node = _require_ledger()
    return {"address": address, "stake": str(node.stake_of(address))}

@app.get("/reward/{address}")
async def get_reward(address: str):
    """Accrued reward plus what the next distribution pass would add."""
    node = _require_ledger()
    return {
        "address": address,
        "reward": str(node.reward_of(address)),
        "next_reward": str(node.calculate_reward(address)),
    }

@app.get("/stakeholder/{address}")
async def get_stakeholder(address: str):
    node = _require_ledger()
    found, index = node.is_stakeholder(address)
    return {"address": address, "is_stakeholder": found, "index": index}

@app.get("/stakeholders")
async def get_stakeholders():
    node = _require_ledger()
    members = node.stakeholders()
    return {
        "count": len(members),
        "stakeholders": [{"address": a, "stake": str(node.stake_of(a))} for a in members],
    }

@app.get("/account/{address}")
async def get_account(address: str):
    node = _require_ledger()
    acc = node.get_account(address)
    data = acc.model_dump()
    for key in ("balance", "stake", "reward", "next_reward"):
        data[key] = str(data[key])
    return data

@app.get("/operations")
async def get_operations(limit: int = 50):
    node = _require_ledger()
    return [r.to_dict() for r in node.get_receipts(limit)]

@app.get("/operations/{seq}")
async def get_operation(seq: int):
    node = _require_ledger()
    receipt = node.get_receipt(seq)
    if not receipt:
        raise HTTPException(status_code=404, detail="Operation not found")
    return receipt.to_dict()

@app.post("/op/send")
async def send_op(op: Operation):
    node = _require_ledger()
    try:
        receipt = node.submit(op)
    except Unauthorized as e:
        raise HTTPException(status_code=403, detail={"code": e.code, "error": str(e), "seq": e.receipt.seq})
    except LedgerError as e:
        raise HTTPException(status_code=400, detail={"code": e.code, "error": str(e), "seq": e.receipt.seq})
    except ProtocolError as e:
        raise HTTPException(status_code=400, detail={"code": e.code, "error": str(e)})
    return receipt.to_dict()

@app.get("/metrics")
async def get_metrics():
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format.
    """
    from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
    from ..observability.metrics import metrics_registry, update_metrics

    node = _require_ledger()
    update_metrics(node)
    return Response(
        content=generate_latest(metrics_registry),
        media_type=CONTENT_TYPE_LATEST
    )

def start_rpc_server(ledger_instance: StakingToken, host: str = "0.0.0.0", port: int = 8000):
    global ledger
    ledger = ledger_instance
    import uvicorn
    uvicorn.run(app, host=host, port=port)
