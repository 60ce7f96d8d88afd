"""
Trial balance aggregator.

Built only from LedgerService.account_balances(), so the trial
balance and the general ledger can never disagree. If total debits
and total credits differ the aggregator raises; it never adjusts a
figure to make the totals meet.
"""

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from bookkeeping.errors import TrialBalanceMismatchError
from bookkeeping.models.enums import BalanceSide
from bookkeeping.schemas.ledger import TrialBalance, TrialBalanceRow
from bookkeeping.services.ledger_service import LedgerService, ZERO

logger = logging.getLogger(__name__)


class TrialBalanceAggregator:

    def __init__(self, db: Session):
        self.db = db
        self.ledger = LedgerService(db)

    def trial_balance(self, organization_id: int, period_id: int) -> TrialBalance:
        """
        Trial balance for a period.

        Raises TrialBalanceMismatchError when the columns disagree.
        """
        rows = []
        total_debits = Decimal("0.00")
        total_credits = Decimal("0.00")

        for balance in self.ledger.account_balances(organization_id, period_id):
            if balance.side == BalanceSide.DEBIT:
                debit, credit = balance.amount, ZERO
            else:
                debit, credit = ZERO, balance.amount
            rows.append(TrialBalanceRow(
                account_code=balance.account_code,
                account_name=balance.account_name,
                debit=debit,
                credit=credit,
            ))
            total_debits += debit
            total_credits += credit

        if total_debits != total_credits:
            logger.error(
                "Trial balance mismatch for organization %s, period %s: "
                "debits=%s credits=%s",
                organization_id, period_id, total_debits, total_credits,
            )
            raise TrialBalanceMismatchError(
                organization_id, period_id, total_debits, total_credits
            )

        return TrialBalance(
            organization_id=organization_id,
            fiscal_period_id=period_id,
            rows=rows,
            total_debits=total_debits,
            total_credits=total_credits,
        )
