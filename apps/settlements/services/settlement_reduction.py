"""
Settlement reduction.

Greedy two-pointer matching of the largest debtor with the largest
creditor. Produces at most (debtors + creditors - 1) transfers; not a
proven global minimum.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List
from uuid import UUID

from .balance_calculation import UserBalance


@dataclass(frozen=True)
class SettlementDraft:
    from_user_id: UUID
    to_user_id: UUID
    amount: Decimal


def reduce_balances(balances: Iterable[UserBalance]) -> List[SettlementDraft]:
    """
    Turn net balances into payment instructions that zero them out.

    Ties keep their order from ``balances`` (the sort is stable).
    """
    balances = list(balances)

    debtors = [[b.user_id, b.owes_amount] for b in balances if b.net_balance < 0]
    creditors = [[b.user_id, b.owed_amount] for b in balances if b.net_balance > 0]

    debtors.sort(key=lambda entry: entry[1], reverse=True)
    creditors.sort(key=lambda entry: entry[1], reverse=True)

    drafts = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        debtor, creditor = debtors[i], creditors[j]
        transfer = min(debtor[1], creditor[1])

        drafts.append(SettlementDraft(
            from_user_id=debtor[0],
            to_user_id=creditor[0],
            amount=transfer,
        ))

        debtor[1] -= transfer
        creditor[1] -= transfer

        if debtor[1] == 0:
            i += 1
        if creditor[1] == 0:
            j += 1

    return drafts
