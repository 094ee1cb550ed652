"""
Group Ledger Engine

This module turns a group's raw expense and settlement records into a
pairwise debt ledger, per-member net balances, and a minimal list of
suggested payments that settles the whole group.

Pipeline:
1. Build a stable member index from the group's member list
2. Fold every unpaid, non-self split into ledger[ower][payer]
3. Fold every recorded settlement out of ledger[payer][receiver]
4. Net each unordered pair down to a single non-negative direction
5. Derive each member's signed balance from the netted ledger
6. Greedily match the largest debtor with the largest creditor

The engine never touches storage and never mutates its inputs; every stage
returns a fresh structure, so it is safe to call from concurrent requests.

Example Usage:
    from split_ledger.utils.ledger_engine import compute_group_ledger

    members = ["A", "B", "C"]
    expenses = [
        {"payer": "A", "splits": [
            {"member": "A", "amount": Decimal("30"), "paid": False},
            {"member": "B", "amount": Decimal("30"), "paid": False},
            {"member": "C", "amount": Decimal("30"), "paid": False},
        ]},
    ]
    settlements = [{"payer": "B", "receiver": "A", "amount": Decimal("10")}]

    result = compute_group_ledger(members, expenses, settlements)

    # result["suggested_settlements"]:
    # [{"from": "C", "to": "A", "amount": Decimal("30.00")},
    #  {"from": "B", "to": "A", "amount": Decimal("20.00")}]
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

TOLERANCE = Decimal('0.01')
ZERO = Decimal('0')

Ledger = Dict[str, Dict[str, Decimal]]


def to_decimal(value: Any) -> Decimal:
    """Coerce int, float, str or Decimal amounts to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_decimal(value: Decimal, precision: Decimal = TOLERANCE) -> Decimal:
    """
    Round a Decimal value to the specified precision.

    Halves round up: 0.125 becomes 0.13.

    Args:
        value: The Decimal value to round
        precision: The precision to round to (default: 0.01 for cents)

    Returns:
        Rounded Decimal value

    Example:
        >>> round_decimal(Decimal("43.333333"))
        Decimal('43.33')
    """
    return value.quantize(precision, rounding=ROUND_HALF_UP)


def validate_balance_sum(balances: Dict[str, Decimal], tolerance: Decimal = TOLERANCE) -> None:
    """
    Validate that the sum of all balances is approximately zero.

    Greedy matching only yields a complete, minimal plan when total debt equals
    total credit, so this is checked before any settlements are suggested.

    Raises:
        ValueError: If the sum of balances exceeds the tolerance
    """
    total = sum(balances.values(), ZERO)
    if abs(total) > tolerance:
        raise ValueError(
            f"Balances not zero-sum: total={total}, tolerance={tolerance}. "
            f"This indicates unbalanced ledger data."
        )


def build_member_index(members: List[Any]) -> List[str]:
    """
    Return member identifiers in the order they were given.

    Members may be bare identifiers or dicts carrying an ``id`` key. Duplicate
    identifiers keep their first position.
    """
    index: List[str] = []
    seen = set()
    for member in members:
        member_id = member["id"] if isinstance(member, dict) else member
        if member_id in seen:
            continue
        seen.add(member_id)
        index.append(member_id)
    return index


def init_ledger(ids: List[str]) -> Tuple[Ledger, Dict[str, Decimal]]:
    """Zero-filled ledger for every ordered pair of distinct members, plus zero totals."""
    ledger: Ledger = {a: {b: ZERO for b in ids if b != a} for a in ids}
    totals = {member_id: ZERO for member_id in ids}
    return ledger, totals


def build_ledger(
    ids: List[str],
    expenses: List[Dict],
    settlements: List[Dict],
) -> Tuple[Ledger, Dict[str, Decimal]]:
    """
    Fold expenses and settlements into a directed, un-netted ledger.

    Each unpaid split where the ower is not the payer adds its amount to
    ledger[ower][payer]. Each settlement subtracts its amount from
    ledger[payer][receiver], which may drive the entry negative until netting.

    Args:
        ids: Member index from build_member_index()
        expenses: List of expense dictionaries with format:
            {
                "payer": str,
                "splits": [{"member": str, "amount": Decimal, "paid": bool}, ...]
            }
        settlements: List of settlement dictionaries with format:
            {"payer": str, "receiver": str, "amount": Decimal}

    Returns:
        Tuple of (ledger, raw_totals). raw_totals tracks the money flow per
        member before netting.
    """
    ledger, totals = init_ledger(ids)

    for expense in expenses:
        payer = expense["payer"]
        for split in expense.get("splits", []):
            ower = split["member"]
            if ower == payer or split.get("paid", False):
                continue
            amount = to_decimal(split["amount"])
            totals[payer] += amount
            totals[ower] -= amount
            ledger[ower][payer] += amount

    for settlement in settlements:
        payer = settlement["payer"]
        receiver = settlement["receiver"]
        amount = to_decimal(settlement["amount"])
        totals[payer] += amount
        totals[receiver] -= amount
        ledger[payer][receiver] -= amount

    return ledger, totals


def net_ledger(ids: List[str], ledger: Ledger) -> Ledger:
    """
    Collapse both directions of every member pair into one non-negative debt.

    Pairs are visited once each, in member-index order (i < j). The input
    ledger is left untouched; a netted copy is returned.

    Example:
        >>> ledger = {"A": {"B": Decimal("40")}, "B": {"A": Decimal("25")}}
        >>> net_ledger(["A", "B"], ledger)
        {'A': {'B': Decimal('15')}, 'B': {'A': Decimal('0')}}
    """
    netted: Ledger = {a: dict(row) for a, row in ledger.items()}

    for i, a in enumerate(ids):
        for b in ids[i + 1:]:
            diff = netted[a][b] - netted[b][a]
            if diff > 0:
                netted[a][b] = diff
                netted[b][a] = ZERO
            elif diff < 0:
                netted[b][a] = -diff
                netted[a][b] = ZERO
            else:
                netted[a][b] = ZERO
                netted[b][a] = ZERO

    return netted


def derive_balances(ids: List[str], ledger: Ledger) -> Dict[str, Decimal]:
    """
    Compute each member's signed net balance from a netted ledger.

    Positive balance: the member is owed money (creditor).
    Negative balance: the member owes money (debtor).
    """
    balances = {member_id: ZERO for member_id in ids}
    for debtor in ids:
        for creditor, amount in ledger[debtor].items():
            if amount > 0:
                balances[debtor] -= amount
                balances[creditor] += amount
    return balances


def simplify_debts(
    balances: Dict[str, Decimal],
    tolerance: Decimal = TOLERANCE,
    max_iterations: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """
    Produce the fewest payments that bring every balance to zero.

    Uses a greedy two-pointer match:
    1. Debtors (balance < -tolerance) and creditors (balance > tolerance) are
       collected in balance-dict order
    2. Both lists are sorted largest first; the sort is stable, so equal
       amounts keep member order
    3. The current debtor pays the current creditor min(debt, credit)
    4. Remainders are reduced by the unrounded amount; a party is done once
       its remainder drops below tolerance

    The result has at most len(debtors) + len(creditors) - 1 entries.

    Args:
        balances: Dictionary mapping member_id -> net_balance
        tolerance: Zero threshold for balances and remainders (default: 0.01)
        max_iterations: Guard against runaway loops (default: one step per
            debtor and creditor, which the loop never needs to exceed)

    Returns:
        List of suggested payments:
        [{"from": str, "to": str, "amount": Decimal}, ...]

    Raises:
        ValueError: If balances don't sum to zero (beyond tolerance)
        RuntimeError: If max_iterations is exceeded

    Example:
        >>> simplify_debts({"A": Decimal("50"), "B": Decimal("-20"), "C": Decimal("-30")})
        [{'from': 'C', 'to': 'A', 'amount': Decimal('30.00')},
         {'from': 'B', 'to': 'A', 'amount': Decimal('20.00')}]
    """
    if not balances:
        return []

    validate_balance_sum(balances, tolerance)

    debtors = [[member_id, -balance] for member_id, balance in balances.items() if balance < -tolerance]
    creditors = [[member_id, balance] for member_id, balance in balances.items() if balance > tolerance]

    debtors.sort(key=lambda x: x[1], reverse=True)
    creditors.sort(key=lambda x: x[1], reverse=True)

    if max_iterations is None:
        max_iterations = len(debtors) + len(creditors)

    suggestions: List[Dict[str, Any]] = []
    iterations = 0

    i, j = 0, 0
    while i < len(debtors) and j < len(creditors):
        iterations += 1
        if iterations > max_iterations:
            raise RuntimeError(
                f"Settlement loop exceeded max_iterations ({max_iterations}). "
                f"This may indicate malformed input or rounding issues."
            )

        debtor = debtors[i]
        creditor = creditors[j]

        amount = min(debtor[1], creditor[1])
        rounded = round_decimal(amount)
        if rounded > 0:
            suggestions.append({"from": debtor[0], "to": creditor[0], "amount": rounded})

        debtor[1] -= amount
        creditor[1] -= amount

        if debtor[1] < tolerance:
            i += 1
        if creditor[1] < tolerance:
            j += 1

    return suggestions


def _member_details(member: Any) -> Dict[str, Any]:
    if isinstance(member, dict):
        return {"name": member.get("name"), "image_url": member.get("image_url")}
    return {"name": None, "image_url": None}


def compute_group_ledger(
    members: List[Any],
    expenses: List[Dict],
    settlements: List[Dict],
) -> Dict[str, Any]:
    """
    Run the full pipeline for one group snapshot.

    Args:
        members: Ordered member list, either bare ids or
            {"id": str, "name": str, "image_url": str} dicts
        expenses: Expense records, see build_ledger()
        settlements: Settlement records, see build_ledger()

    Returns:
        {
            "balances": [{"member_id", "name", "image_url", "total_balance",
                          "owes": [{"to", "amount"}],
                          "owed_by": [{"from", "amount"}]}, ...],
            "suggested_settlements": [{"from", "to", "amount"}, ...],
            "ledger": {debtor: {creditor: amount}}
        }

        Balances follow member order; owes/owed_by list only positive
        entries, also in member order.
    """
    ids = build_member_index(members)
    details: Dict[str, Dict[str, Any]] = {}
    for member in members:
        member_id = member["id"] if isinstance(member, dict) else member
        details.setdefault(member_id, _member_details(member))

    raw_ledger, _ = build_ledger(ids, expenses, settlements)
    ledger = net_ledger(ids, raw_ledger)
    balances = derive_balances(ids, ledger)
    suggestions = simplify_debts(balances)

    logger.debug(
        f"Ledger computed for {len(ids)} members, {len(expenses)} expenses, "
        f"{len(settlements)} settlements: {len(suggestions)} suggested payments"
    )

    shaped = []
    for member_id in ids:
        shaped.append({
            "member_id": member_id,
            "name": details[member_id]["name"],
            "image_url": details[member_id]["image_url"],
            "total_balance": balances[member_id],
            "owes": [
                {"to": other, "amount": ledger[member_id][other]}
                for other in ids
                if other != member_id and ledger[member_id][other] > 0
            ],
            "owed_by": [
                {"from": other, "amount": ledger[other][member_id]}
                for other in ids
                if other != member_id and ledger[other][member_id] > 0
            ],
        })

    return {
        "balances": shaped,
        "suggested_settlements": suggestions,
        "ledger": ledger,
    }
