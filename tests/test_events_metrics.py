"""
Tests for operation lifecycle tracking

Tests:
- EventBus pub/sub mechanism
- Ledger events after commit and on rejection
- Prometheus metrics integration
"""
import pytest
import os
import shutil

from stakeledger.core.events import EventBus
from stakeledger.core.staking import StakingToken
from stakeledger.observability.metrics import metrics_registry, update_metrics
from stakeproto.types.common import InsufficientStake


TEST_DB_DIR = "./test_events_db"

OWNER = "stt1owner"
USER = "stt1user"


# ═══════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════

@pytest.fixture
def clean_event_bus():
    """Provide a clean EventBus for each test."""
    return EventBus()


@pytest.fixture
def ledger(clean_event_bus):
    if os.path.exists(TEST_DB_DIR):
        shutil.rmtree(TEST_DB_DIR)
    os.makedirs(TEST_DB_DIR)

    token = StakingToken(os.path.join(TEST_DB_DIR, "ledger.db"), owner=OWNER,
                         initial_supply=10**21, bus=clean_event_bus)
    yield token

    token.close()
    if os.path.exists(TEST_DB_DIR):
        shutil.rmtree(TEST_DB_DIR)


# ═══════════════════════════════════════════════════════════════════
# EVENTBUS TESTS
# ═══════════════════════════════════════════════════════════════════

def test_eventbus_subscribe_and_emit(clean_event_bus):
    bus = clean_event_bus
    callback_data = []

    def callback(**data):
        callback_data.append(data)

    bus.subscribe('test_event', callback)
    delivered = bus.emit('test_event', value=42, name='test')

    assert delivered == 1
    assert callback_data == [{'value': 42, 'name': 'test'}]


def test_eventbus_cancel_subscription(clean_event_bus):
    bus = clean_event_bus
    called = []

    def callback(**data):
        called.append(data)

    cancel = bus.subscribe('test_event', callback)
    cancel()
    cancel()

    assert bus.emit('test_event', value=1) == 0
    assert called == []


def test_eventbus_callback_error_isolated(clean_event_bus):
    """A failing listener does not stop the others."""
    bus = clean_event_bus
    called = []

    def bad_callback(**data):
        raise RuntimeError("boom")

    def good_callback(**data):
        called.append(data)

    bus.subscribe('test_event', bad_callback)
    bus.subscribe('test_event', good_callback)
    assert bus.emit('test_event', value=1) == 1
    assert called == [{'value': 1}]


# ═══════════════════════════════════════════════════════════════════
# LEDGER EVENT TESTS
# ═══════════════════════════════════════════════════════════════════

def test_stake_events_emitted(ledger, clean_event_bus):
    created, removed = [], []
    clean_event_bus.subscribe('stake_created', lambda receipt: created.append(receipt))
    clean_event_bus.subscribe('stake_removed', lambda receipt: removed.append(receipt))

    ledger.transfer(OWNER, USER, 100)
    ledger.create_stake(USER, 60)
    ledger.remove_stake(USER, 60)

    assert len(created) == 1
    assert created[0].burned == 60
    assert len(removed) == 1
    assert removed[0].minted == 60


def test_distribution_event_carries_totals(ledger, clean_event_bus):
    events = []
    clean_event_bus.subscribe('rewards_distributed', lambda receipt: events.append(receipt))

    ledger.transfer(OWNER, USER, 1000)
    ledger.create_stake(USER, 1000)
    ledger.distribute_rewards(OWNER)

    assert events[0].details["total_credited"] == 10
    assert events[0].details["credited"] == {USER: "10"}


def test_failed_event_emitted(ledger, clean_event_bus):
    failures = []
    clean_event_bus.subscribe('operation_failed', lambda receipt, error: failures.append((receipt, error)))

    with pytest.raises(InsufficientStake):
        ledger.remove_stake(USER, 1)

    receipt, error = failures[0]
    assert receipt.error_code == "INSUFFICIENT_STAKE"
    assert isinstance(error, InsufficientStake)


def test_listener_error_does_not_undo_operation(ledger, clean_event_bus):
    def bad_listener(receipt):
        raise RuntimeError("listener failure")

    clean_event_bus.subscribe('transfer', bad_listener)
    ledger.transfer(OWNER, USER, 5)

    assert ledger.balance_of(USER) == 5


# ═══════════════════════════════════════════════════════════════════
# METRICS TESTS
# ═══════════════════════════════════════════════════════════════════

def test_operation_counter_increments(ledger):
    labels = {'op_type': 'CREATE_STAKE', 'status': 'applied'}
    before = metrics_registry.get_sample_value('stakeledger_operations_total', labels) or 0

    ledger.transfer(OWNER, USER, 10)
    ledger.create_stake(USER, 10)

    after = metrics_registry.get_sample_value('stakeledger_operations_total', labels)
    assert after == before + 1


def test_gauges_follow_state(ledger):
    ledger.transfer(OWNER, USER, 500)
    ledger.create_stake(USER, 500)
    ledger.distribute_rewards(OWNER)

    update_metrics(ledger)

    assert metrics_registry.get_sample_value('stakeledger_total_staked') == 500
    assert metrics_registry.get_sample_value('stakeledger_stakeholders_total') == 1
    assert metrics_registry.get_sample_value('stakeledger_total_rewards_outstanding') == 5
    assert metrics_registry.get_sample_value('stakeledger_total_supply') == float(10**21 - 500)
