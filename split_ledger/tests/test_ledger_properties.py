"""
Property checks for the ledger engine over generated groups.

Every generated group is checked for:
1. Conservation (balances sum to zero)
2. Ledger exclusivity after netting
3. Settlement completeness
4. The greedy transaction bound
5. Determinism of the full result
"""

import random
import pytest
from decimal import Decimal
from typing import Dict, List, Tuple
from split_ledger.utils.ledger_engine import (
    TOLERANCE,
    build_ledger,
    compute_group_ledger,
    derive_balances,
    net_ledger,
)
from split_ledger.tests.conftest import verify_settlements_settle_debts


def cents(rng: random.Random, low: int = 0, high: int = 20000) -> Decimal:
    return Decimal(rng.randint(low, high)) / Decimal(100)


def generate_group(seed: int) -> Tuple[List[str], List[Dict], List[Dict]]:
    rng = random.Random(seed)
    members = [f"user-{n}" for n in range(rng.randint(2, 8))]

    expenses = []
    for _ in range(rng.randint(0, 12)):
        payer = rng.choice(members)
        participants = rng.sample(members, rng.randint(1, len(members)))
        expenses.append({
            "payer": payer,
            "splits": [
                {"member": member, "amount": cents(rng), "paid": rng.random() < 0.15}
                for member in participants
            ],
        })

    settlements = []
    for _ in range(rng.randint(0, 5)):
        payer, receiver = rng.sample(members, 2)
        settlements.append({"payer": payer, "receiver": receiver, "amount": cents(rng, 1, 5000)})

    return members, expenses, settlements


SEEDS = list(range(40))


@pytest.mark.unit
@pytest.mark.parametrize("seed", SEEDS)
def test_balances_are_conserved(seed):
    members, expenses, settlements = generate_group(seed)
    result = compute_group_ledger(members, expenses, settlements)

    total = sum((b["total_balance"] for b in result["balances"]), Decimal("0"))
    assert abs(total) <= Decimal("1e-6")


@pytest.mark.unit
@pytest.mark.parametrize("seed", SEEDS)
def test_netted_ledger_has_one_direction_per_pair(seed):
    members, expenses, settlements = generate_group(seed)
    ledger = net_ledger(members, build_ledger(members, expenses, settlements)[0])

    for a in members:
        for b in members:
            if a == b:
                continue
            assert ledger[a][b] >= 0
            if ledger[a][b] > 0:
                assert ledger[b][a] == 0


@pytest.mark.unit
@pytest.mark.parametrize("seed", SEEDS)
def test_suggestions_settle_every_balance(seed):
    members, expenses, settlements = generate_group(seed)
    result = compute_group_ledger(members, expenses, settlements)
    balances = {b["member_id"]: b["total_balance"] for b in result["balances"]}

    for suggestion in result["suggested_settlements"]:
        assert suggestion["amount"] > 0
        assert suggestion["from"] != suggestion["to"]

    verify_settlements_settle_debts(balances, result["suggested_settlements"])


@pytest.mark.unit
@pytest.mark.parametrize("seed", SEEDS)
def test_transaction_count_bound(seed):
    members, expenses, settlements = generate_group(seed)
    result = compute_group_ledger(members, expenses, settlements)
    balances = [b["total_balance"] for b in result["balances"]]

    debtors = sum(1 for balance in balances if balance < -TOLERANCE)
    creditors = sum(1 for balance in balances if balance > TOLERANCE)

    assert len(result["suggested_settlements"]) <= max(debtors + creditors - 1, 0)


@pytest.mark.unit
@pytest.mark.parametrize("seed", SEEDS)
def test_identical_snapshots_give_identical_results(seed):
    first = compute_group_ledger(*generate_group(seed))
    second = compute_group_ledger(*generate_group(seed))
    assert first == second


@pytest.mark.unit
@pytest.mark.parametrize("seed", SEEDS[:10])
def test_self_splits_change_nothing(seed):
    members, expenses, settlements = generate_group(seed)
    baseline = compute_group_ledger(members, expenses, settlements)

    padded = [
        {**e, "splits": e["splits"] + [{"member": e["payer"], "amount": Decimal("999.99"), "paid": False}]}
        for e in expenses
    ]
    assert compute_group_ledger(members, padded, settlements) == baseline


@pytest.mark.unit
@pytest.mark.parametrize("seed", SEEDS[:10])
def test_paid_splits_change_nothing(seed):
    members, expenses, settlements = generate_group(seed)
    baseline = compute_group_ledger(members, expenses, settlements)

    padded = [
        {**e, "splits": e["splits"] + [{"member": m, "amount": Decimal("123.45"), "paid": True} for m in members]}
        for e in expenses
    ]
    assert compute_group_ledger(members, padded, settlements) == baseline


@pytest.mark.unit
def test_netting_preserves_member_positions():
    members, expenses, settlements = generate_group(7)
    raw, totals = build_ledger(members, expenses, settlements)
    assert derive_balances(members, net_ledger(members, raw)) == totals
