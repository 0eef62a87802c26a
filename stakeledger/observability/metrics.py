# MIT License
# Copyright (c) 2025 Hashborn

"""
Prometheus Metrics Exporter

Exports ledger metrics in Prometheus format.

Metrics:
- Operation count by type and status
- Economic metrics (total supply, minted, burned)
- Staking metrics (total staked, stakeholders, outstanding rewards)
- Distribution pass sizes
"""

from prometheus_client import Counter, Gauge, Histogram, CollectorRegistry

# Create registry for metrics
metrics_registry = CollectorRegistry()

# ═══════════════════════════════════════════════════════════════════
# OPERATION METRICS
# ═══════════════════════════════════════════════════════════════════

operations_total = Counter(
    'stakeledger_operations_total',
    'Total number of operations submitted',
    ['op_type', 'status'],
    registry=metrics_registry
)

last_operation_seq = Gauge(
    'stakeledger_last_operation_seq',
    'Sequence number of the last submitted operation',
    registry=metrics_registry
)

distribution_stakeholders = Histogram(
    'stakeledger_distribution_stakeholders',
    'Number of stakeholders visited per distribution pass',
    buckets=[0, 1, 5, 10, 50, 100, 500, 1000],
    registry=metrics_registry
)

# ═══════════════════════════════════════════════════════════════════
# ECONOMIC METRICS
# ═══════════════════════════════════════════════════════════════════

total_supply = Gauge(
    'stakeledger_total_supply',
    'Circulating token supply (minted - burned)',
    registry=metrics_registry
)

total_minted = Counter(
    'stakeledger_total_minted',
    'Total tokens minted (genesis, unstakes, reward withdrawals)',
    registry=metrics_registry
)

total_burned = Counter(
    'stakeledger_total_burned',
    'Total tokens burned (stakes)',
    registry=metrics_registry
)

# ═══════════════════════════════════════════════════════════════════
# STAKING METRICS
# ═══════════════════════════════════════════════════════════════════

total_staked = Gauge(
    'stakeledger_total_staked',
    'Total tokens staked',
    registry=metrics_registry
)

total_rewards_outstanding = Gauge(
    'stakeledger_total_rewards_outstanding',
    'Rewards credited but not yet withdrawn',
    registry=metrics_registry
)

stakeholders_total = Gauge(
    'stakeledger_stakeholders_total',
    'Number of accounts with a non-zero stake',
    registry=metrics_registry
)


# ═══════════════════════════════════════════════════════════════════
# HELPER FUNCTIONS
# ═══════════════════════════════════════════════════════════════════

def update_operation_metrics(receipt):
    """
    Update counters for one submitted operation.
    Should only be called once per receipt.

    Args:
        receipt: OpReceipt instance
    """
    operations_total.labels(op_type=receipt.op_type, status=receipt.status).inc()
    last_operation_seq.set(receipt.seq)

    if receipt.applied:
        if receipt.minted:
            total_minted.inc(receipt.minted)
        if receipt.burned:
            total_burned.inc(receipt.burned)
        if "stakeholders" in receipt.details:
            distribution_stakeholders.observe(receipt.details["stakeholders"])


def update_metrics(ledger):
    """
    Update all gauges from ledger state.
    Called when metrics are scraped. Only updates Gauges, not Counters/Histograms.

    Args:
        ledger: StakingToken instance
    """
    state = ledger.state

    total_supply.set(state.token.total_supply())
    total_staked.set(state.total_stakes())
    total_rewards_outstanding.set(state.total_rewards())
    stakeholders_total.set(len(state.registry))
