"""
Balance ledger - per-user quotas and consumption

Every deduction is computed in a single pass against one snapshot of the
balance and recorded on the leave request, so restoring reverses exactly what
was taken.
"""
import logging
from typing import Optional

from leaveflow.core.config import settings
from leaveflow.db.store import LeaveStore
from leaveflow.models import BalanceDeduction, LeaveBalance, LeaveNature, LeaveType
from leaveflow.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)


def ensure_balance(store: LeaveStore, user_id: str, year: Optional[int] = None) -> LeaveBalance:
    """
    Get the user's balance, creating it from configured quotas on first use

    Args:
        store: Leave store
        user_id: Owner of the balance
        year: Leave year recorded on a new balance (defaults to the current year)

    Returns:
        LeaveBalance instance
    """
    with store.lock:
        balance = store.balances.get(user_id)
        if balance is None:
            balance = LeaveBalance(
                user_id=user_id,
                year=year or now_utc().year,
                total_days=settings.DEFAULT_TOTAL_DAYS,
                total_hours=settings.DEFAULT_TOTAL_HOURS,
                casual_quota=settings.DEFAULT_CASUAL_QUOTA,
                sick_quota=settings.DEFAULT_SICK_QUOTA,
            )
            store.balances[user_id] = balance
            logger.info("balance created: user_id=%s year=%s", user_id, balance.year)
        return balance


def compute_deduction(
    balance: LeaveBalance,
    leave_type: LeaveType,
    nature: Optional[LeaveNature],
    quantity: float,
) -> BalanceDeduction:
    """
    Work out what a request takes from a balance without mutating it

    Regular leave consumes days, plus the Casual or Sick quota for those natures.
    Short leave consumes hours and takes hours/HOURS_PER_DAY days from the
    remaining Casual quota; whatever Casual cannot cover makes the leave Unpaid.

    Args:
        balance: Balance snapshot
        leave_type: Regular or Short
        nature: Requested nature (ignored for Short leave)
        quantity: Days for Regular leave, hours for Short leave

    Returns:
        BalanceDeduction with the resolved nature
    """
    quantity = max(0.0, float(quantity))

    if leave_type == LeaveType.SHORT:
        as_days = quantity / settings.HOURS_PER_DAY
        remaining = balance.remaining_casual
        covered = min(remaining, as_days)
        resolved = LeaveNature.CASUAL if remaining >= as_days else LeaveNature.UNPAID
        return BalanceDeduction(
            nature=resolved,
            used_hours=quantity,
            casual_days=covered,
        )

    return BalanceDeduction(
        nature=nature,
        used_days=quantity,
        casual_days=quantity if nature == LeaveNature.CASUAL else 0.0,
        sick_days=quantity if nature == LeaveNature.SICK else 0.0,
    )


def uncovered_hours(deduction: BalanceDeduction) -> float:
    """Short-leave hours not covered by the Casual quota."""
    covered_hours = deduction.casual_days * settings.HOURS_PER_DAY
    return round(max(0.0, deduction.used_hours - covered_hours), 2)


def apply_deduction(balance: LeaveBalance, deduction: BalanceDeduction) -> None:
    balance.used_days += deduction.used_days
    balance.used_hours += deduction.used_hours
    balance.casual_used += deduction.casual_days
    balance.sick_used += deduction.sick_days


def deduct(
    store: LeaveStore,
    user_id: str,
    leave_type: LeaveType,
    nature: Optional[LeaveNature],
    quantity: float,
) -> BalanceDeduction:
    """
    Compute and apply a deduction against the user's balance

    Returns:
        The BalanceDeduction that was applied
    """
    with store.lock:
        balance = ensure_balance(store, user_id)
        deduction = compute_deduction(balance, leave_type, nature, quantity)
        apply_deduction(balance, deduction)

    logger.info(
        "balance deducted: user_id=%s type=%s nature=%s days=%s hours=%s casual=%s sick=%s",
        user_id, leave_type.value, deduction.nature.value if deduction.nature else None,
        deduction.used_days, deduction.used_hours, deduction.casual_days, deduction.sick_days,
    )
    return deduction


def restore(store: LeaveStore, user_id: str, deduction: BalanceDeduction) -> LeaveBalance:
    """
    Reverse a deduction; every counter is clamped at zero

    Returns:
        Updated LeaveBalance
    """
    with store.lock:
        balance = ensure_balance(store, user_id)
        balance.used_days = max(0.0, balance.used_days - deduction.used_days)
        balance.used_hours = max(0.0, balance.used_hours - deduction.used_hours)
        balance.casual_used = max(0.0, balance.casual_used - deduction.casual_days)
        balance.sick_used = max(0.0, balance.sick_used - deduction.sick_days)

    logger.info(
        "balance restored: user_id=%s days=%s hours=%s casual=%s sick=%s",
        user_id, deduction.used_days, deduction.used_hours, deduction.casual_days, deduction.sick_days,
    )
    return balance
