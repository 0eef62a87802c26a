"""
RPC API tests (FastAPI TestClient against a throwaway ledger).
"""
import pytest
import os
import shutil
from fastapi.testclient import TestClient

from stakeledger.rpc import api
from stakeledger.core.staking import StakingToken
from stakeledger.core.events import EventBus

TEST_DB_DIR = "./test_rpc_db"

OWNER = "stt1owner"
USER = "stt1user"
MANY_TOKENS = 1000 * 10**18


@pytest.fixture
def client(monkeypatch):
    if os.path.exists(TEST_DB_DIR):
        shutil.rmtree(TEST_DB_DIR)
    os.makedirs(TEST_DB_DIR)

    ledger = StakingToken(os.path.join(TEST_DB_DIR, "ledger.db"), owner=OWNER,
                          initial_supply=MANY_TOKENS, bus=EventBus())
    monkeypatch.setattr(api, "ledger", ledger)
    yield TestClient(api.app)

    ledger.close()
    if os.path.exists(TEST_DB_DIR):
        shutil.rmtree(TEST_DB_DIR)


def send(client, op_type, caller, amount=0, to_address=None):
    body = {"op_type": op_type, "caller": caller, "amount": amount}
    if to_address:
        body["to_address"] = to_address
    return client.post("/op/send", json=body)


def test_not_initialized(monkeypatch):
    monkeypatch.setattr(api, "ledger", None)
    resp = TestClient(api.app).get("/status")
    assert resp.status_code == 503


def test_status(client):
    data = client.get("/status").json()
    assert data["owner"] == OWNER
    assert data["symbol"] == "STT"
    assert data["total_supply"] == str(MANY_TOKENS)
    assert data["stakeholders"] == 0


def test_stake_reward_withdraw_flow(client):
    assert send(client, "TRANSFER", OWNER, 100, USER).status_code == 200
    resp = send(client, "CREATE_STAKE", USER, 100)
    assert resp.status_code == 200
    assert resp.json()["burned"] == "100"

    assert client.get(f"/stake/{USER}").json()["stake"] == "100"
    assert client.get(f"/stakeholder/{USER}").json() == {"address": USER, "is_stakeholder": True, "index": 0}
    assert client.get(f"/reward/{USER}").json()["next_reward"] == "1"

    resp = send(client, "DISTRIBUTE_REWARDS", OWNER)
    assert resp.status_code == 200
    assert resp.json()["details"]["total_credited"] == 1

    resp = send(client, "WITHDRAW_REWARD", USER)
    assert resp.json()["minted"] == "1"

    account = client.get(f"/account/{USER}").json()
    assert account["balance"] == "1"
    assert account["stake"] == "100"
    assert account["reward"] == "0"

    stakeholders = client.get("/stakeholders").json()
    assert stakeholders["count"] == 1
    assert stakeholders["stakeholders"][0] == {"address": USER, "stake": "100"}


def test_non_owner_distribution_forbidden(client):
    resp = send(client, "DISTRIBUTE_REWARDS", USER)
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "UNAUTHORIZED"


def test_insufficient_balance_rejected(client):
    resp = send(client, "CREATE_STAKE", USER, 1)
    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["code"] == "INSUFFICIENT_BALANCE"

    receipt = client.get(f"/operations/{detail['seq']}").json()
    assert receipt["status"] == "failed"


def test_insufficient_stake_rejected(client):
    resp = send(client, "REMOVE_STAKE", USER, 1)
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "INSUFFICIENT_STAKE"


def test_operations_listing(client):
    send(client, "TRANSFER", OWNER, 3, USER)
    send(client, "CREATE_STAKE", USER, 1)

    ops = client.get("/operations?limit=10").json()
    assert [o["op_type"] for o in ops] == ["CREATE_STAKE", "TRANSFER"]
    assert client.get("/operations/999").status_code == 404


def test_metrics_endpoint(client):
    send(client, "TRANSFER", OWNER, 3, USER)
    send(client, "CREATE_STAKE", USER, 3)

    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "stakeledger_total_staked" in resp.text
