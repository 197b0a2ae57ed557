"""
Analytics Service.

Aggregates ledger data for dashboards. READ-ONLY.
"""

from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from freight_ledger.app.domain.ledger.aggregator import summarize_debts, unpaid_debts
from freight_ledger.app.domain.ledger.money import ZERO, quantize
from freight_ledger.app.repositories import debts as debt_repo
from freight_ledger.app.repositories import expenses as expense_repo
from freight_ledger.app.schemas.debt import DebtSummaryResponse
from freight_ledger.app.schemas.expense import ExpenseBucket, ExpenseSummaryResponse


class AnalyticsService:

    @staticmethod
    async def get_debt_summary(db: AsyncSession) -> DebtSummaryResponse:
        """Totals across all debts, recomputed from the payment ledger."""
        debts = await debt_repo.list_debts(db)
        payments = await debt_repo.list_payments(db)

        totals = summarize_debts(debts, payments)
        return DebtSummaryResponse(
            total_debt=totals.total_debt,
            total_remaining=totals.total_remaining,
            total_paid=totals.total_paid,
            open_debts=len(unpaid_debts(debts, payments)),
        )

    @staticmethod
    async def get_expense_summary(
        db: AsyncSession,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> ExpenseSummaryResponse:
        """
        Expense totals per category and per month (YYYY-MM).

        Missing amounts count as zero. Categories are sorted by bolívares
        spent, largest first; months chronologically.
        """
        expenses = await expense_repo.list_all_expenses(db, date_from=date_from, date_to=date_to)

        by_category: "OrderedDict[str, list]" = OrderedDict()
        by_month: "OrderedDict[str, list]" = OrderedDict()
        total_divisa = ZERO
        total_bolivares = ZERO

        for expense in expenses:
            divisa = Decimal(expense.pago_divisa or 0)
            bolivares = Decimal(expense.pago_bolivares or 0)
            total_divisa += divisa
            total_bolivares += bolivares

            month = expense.expense_date.strftime("%Y-%m")
            for buckets, label in ((by_category, expense.category), (by_month, month)):
                bucket = buckets.setdefault(label, [ZERO, ZERO, 0])
                bucket[0] += divisa
                bucket[1] += bolivares
                bucket[2] += 1

        def to_buckets(buckets):
            return [
                ExpenseBucket(label=label, divisa=quantize(d), bolivares=quantize(b), count=n)
                for label, (d, b, n) in buckets.items()
            ]

        categories = sorted(to_buckets(by_category), key=lambda b: b.bolivares, reverse=True)
        months = sorted(to_buckets(by_month), key=lambda b: b.label)

        return ExpenseSummaryResponse(
            by_category=categories,
            by_month=months,
            total_divisa=quantize(total_divisa),
            total_bolivares=quantize(total_bolivares),
        )
