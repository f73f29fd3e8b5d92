"""
Limit checking for spendpolicy.

Compares a spend amount against the ceiling of a resolved policy. The upper
bound is inclusive and the comparison is exact decimal arithmetic, so an
amount of 100.00 against a ceiling of 100 is allowed and 100.01 is not.
"""

from decimal import Decimal, InvalidOperation

from spendpolicy.errors import InvalidAmountError
from spendpolicy.schema import LimitCheck, SpendPolicy


def to_decimal(amount: Decimal | int | float | str) -> Decimal:
    """
    Convert an amount to an exact, finite Decimal.

    Floats go through str() so 100.01 becomes Decimal("100.01") rather than
    its binary approximation.

    Raises:
        InvalidAmountError: If the amount is not a finite number
    """
    if isinstance(amount, bool):
        raise InvalidAmountError(amount=str(amount))
    try:
        if isinstance(amount, float):
            value = Decimal(str(amount))
        elif isinstance(amount, str):
            value = Decimal(amount.strip())
        else:
            value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise InvalidAmountError(amount=str(amount)) from e

    if not value.is_finite():
        raise InvalidAmountError(amount=str(amount))
    return value


def check_limit(
    amount: Decimal | int | float | str,
    policy: SpendPolicy | None,
) -> LimitCheck:
    """
    Check whether an amount is within a policy's ceiling.

    Args:
        amount: The spend amount
        policy: The governing policy, or None if resolution found nothing

    Returns:
        LimitCheck; always denied when there is no policy

    Raises:
        InvalidAmountError: If amount is not a finite decimal
    """
    value = to_decimal(amount)

    if policy is None:
        return LimitCheck.deny("No applicable policy found", amount=value)

    max_amount = policy.max_amount
    if value <= max_amount:
        return LimitCheck.allow(
            f"Amount {value} is within policy limit of {max_amount}",
            amount=value,
            max_amount=max_amount,
            policy_id=policy.id,
        )

    return LimitCheck.deny(
        f"Amount {value} exceeds policy limit of {max_amount}",
        amount=value,
        max_amount=max_amount,
        policy_id=policy.id,
    )
