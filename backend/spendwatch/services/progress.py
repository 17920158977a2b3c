"""Budget progress aggregation, overview totals and health scoring."""
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from spendwatch.models.budget import (
    Budget,
    BudgetHealth,
    BudgetOverview,
    BudgetProgress,
    HealthBreakdown,
    Period,
    matches_category,
)
from spendwatch.models.transaction import Transaction
from spendwatch.services.currency import CurrencyNormalizer, round_amount
from spendwatch.services.periods import PeriodResolver
from spendwatch.services.records import iter_valid
from spendwatch.utils.timestamp import ensure_utc

logger = logging.getLogger(__name__)

# Usage tiers shared by health scoring and the on-track count
HIGH_USAGE_PERCENT = 80.0
MEDIUM_USAGE_PERCENT = 60.0
LOW_USAGE_PERCENT = 40.0


class BudgetProgressAggregator:
    """Sums a budget's spend for the period containing ``now``."""

    def __init__(
        self,
        period_resolver: Optional[PeriodResolver] = None,
        normalizer: Optional[CurrencyNormalizer] = None,
    ):
        self.period_resolver = period_resolver or PeriodResolver()
        self.normalizer = normalizer or CurrencyNormalizer()

    def filter_expenses(
        self,
        budget: Budget,
        transactions: Iterable,
        period: Period,
    ) -> List[Transaction]:
        """Expenses inside ``period`` whose category counts towards ``budget``."""
        return [
            tx
            for tx in iter_valid(transactions, Transaction)
            if tx.is_expense
            and period.contains(tx.date)
            and matches_category(budget.category, tx.category)
        ]

    def aggregate(
        self,
        budget: Budget,
        transactions: Iterable,
        now: datetime,
    ) -> BudgetProgress:
        """
        Compute progress for one budget.

        Args:
            budget: Budget to measure (amount already validated > 0)
            transactions: The user's transactions, as models or raw mappings
            now: Reference moment supplied by the caller

        Returns:
            BudgetProgress for the current period
        """
        period = self.period_resolver.resolve(budget.recurrence, budget.start_date, now)
        if ensure_utc(now) < budget.start_date:
            # Not active yet: first-period bounds, nothing spent
            expenses = []
        else:
            expenses = self.filter_expenses(budget, transactions, period)

        total = sum(
            self.normalizer.normalize(tx.amount, tx.from_rate, tx.to_rate, budget.currency)
            for tx in expenses
        )
        total_spent = round_amount(total, budget.currency)
        progress = BudgetProgress(
            budget_id=budget.id,
            title=budget.title,
            amount=budget.amount,
            currency=budget.currency,
            recurrence=budget.recurrence,
            category=budget.category,
            period_start=period.start,
            period_end=period.end,
            total_spent=total_spent,
            remaining=round_amount(budget.amount - total_spent, budget.currency),
            progress=total_spent * 100 / budget.amount,
            is_over_budget=total_spent > budget.amount,
            expenses_count=len(expenses),
        )
        logger.debug(
            "Aggregated budget progress",
            extra={
                "budget_id": budget.id,
                "expenses_count": progress.expenses_count,
                "total_spent": progress.total_spent,
            },
        )
        return progress


class BudgetHealthScorer:
    """Simple weighted score over a set of budget progress figures."""

    BASE_SCORE = 100
    OVER_BUDGET_PENALTY = 20
    HIGH_USAGE_PENALTY = 10
    MEDIUM_USAGE_PENALTY = 5
    LOW_USAGE_BONUS = 5
    PERFECT_RECORD_BONUS = 10

    # (minimum score, label, color), highest first
    LABELS = (
        (90, "Excellent!", "green"),
        (75, "Great!", "green"),
        (60, "Good", "blue"),
        (40, "Fair", "yellow"),
        (20, "Poor", "orange"),
        (0, "Critical", "red"),
    )

    def score(self, budgets: Sequence[BudgetProgress]) -> BudgetHealth:
        if not budgets:
            return BudgetHealth(score=0, label="No Data", color="gray")

        over = sum(1 for b in budgets if b.is_over_budget)
        high = sum(1 for b in budgets if not b.is_over_budget and b.progress >= HIGH_USAGE_PERCENT)
        medium = sum(
            1
            for b in budgets
            if not b.is_over_budget and MEDIUM_USAGE_PERCENT <= b.progress < HIGH_USAGE_PERCENT
        )
        low = sum(1 for b in budgets if b.progress < LOW_USAGE_PERCENT)

        breakdown = HealthBreakdown(
            base_score=self.BASE_SCORE,
            over_budget_penalty=over * self.OVER_BUDGET_PENALTY,
            high_usage_penalty=high * self.HIGH_USAGE_PENALTY,
            medium_usage_penalty=medium * self.MEDIUM_USAGE_PENALTY,
            low_usage_bonus=low * self.LOW_USAGE_BONUS,
            perfect_record_bonus=self.PERFECT_RECORD_BONUS if over == 0 else 0,
            over_budget_count=over,
            high_usage_count=high,
            medium_usage_count=medium,
            low_usage_count=low,
        )
        raw = (
            breakdown.base_score
            - breakdown.over_budget_penalty
            - breakdown.high_usage_penalty
            - breakdown.medium_usage_penalty
            + breakdown.low_usage_bonus
            + breakdown.perfect_record_bonus
        )
        score = max(0, min(100, raw))
        label, color = next((label, color) for minimum, label, color in self.LABELS if score >= minimum)
        return BudgetHealth(score=score, label=label, color=color, breakdown=breakdown)


class BudgetOverviewBuilder:
    """Progress for every budget plus the dashboard totals."""

    def __init__(
        self,
        aggregator: Optional[BudgetProgressAggregator] = None,
        health_scorer: Optional[BudgetHealthScorer] = None,
    ):
        self.aggregator = aggregator or BudgetProgressAggregator()
        self.health_scorer = health_scorer or BudgetHealthScorer()

    def build(
        self,
        budgets: Sequence[Budget],
        transactions: Iterable,
        now: datetime,
    ) -> BudgetOverview:
        """
        Aggregate all budgets of a user.

        Totals add budget amounts as-is; budgets are expected to share the
        user's home currency.
        """
        if not budgets:
            return BudgetOverview(budget_health=self.health_scorer.score([]))

        now = ensure_utc(now)
        valid = list(iter_valid(transactions, Transaction))
        progress_list = [self.aggregator.aggregate(budget, valid, now) for budget in budgets]

        total_budget_amount = sum(p.amount for p in progress_list)
        total_spent = sum(p.total_spent for p in progress_list)
        total_progress = total_spent * 100 / total_budget_amount if total_budget_amount > 0 else 0.0

        active_this_month = sum(
            1
            for budget, p in zip(budgets, progress_list)
            if budget.start_date <= now
            and p.period_start.year == now.year
            and p.period_start.month == now.month
        )
        savings = sum(p.remaining for p in progress_list if p.remaining > 0)
        resolver = self.aggregator.period_resolver
        days_until_reset = min(
            resolver.days_until_reset(b.recurrence, b.start_date, now) for b in budgets
        )
        on_track = sum(
            1 for p in progress_list if not p.is_over_budget and p.progress < HIGH_USAGE_PERCENT
        )

        return BudgetOverview(
            budgets=progress_list,
            total_budget_amount=round_amount(total_budget_amount),
            total_spent=round_amount(total_spent),
            total_progress=total_progress,
            active_budgets_this_month=active_this_month,
            savings_achieved=round_amount(savings),
            days_until_reset=days_until_reset,
            on_track_budgets=on_track,
            budget_health=self.health_scorer.score(progress_list),
        )
