"""
Expense splitting calculator.

Divides one expense amount into per-participant shares under four
strategies (equal, percentage, custom, weighted). Pure: it never touches
the database and never looks up event membership.

Precision follows the minor-unit scheme: the amount is converted to the
smallest currency unit (cents, or whole yen for zero-decimal currencies),
every share is rounded down to a whole unit, and the leftover units are
handed out one at a time by largest remainder (input order breaks ties,
zero shares never receive one). Shares therefore always sum exactly to the
expense amount. Derived percentages are distributed the same way in
hundredths of a percent so they always sum exactly to 100; percentages a
caller supplies are stored as given.

Example:
    100.00 split equally among 3 people::

        >>> drafts = compute_shares(
        ...     amount=Decimal('100.00'),
        ...     split_type='equal',
        ...     participants=[SplitParticipant(u1), SplitParticipant(u2), SplitParticipant(u3)],
        ... )
        >>> [d.amount for d in drafts]
        [Decimal('33.34'), Decimal('33.33'), Decimal('33.33')]
        >>> [d.percentage for d in drafts]
        [Decimal('33.34'), Decimal('33.33'), Decimal('33.33')]
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Any, List, Optional, Sequence
from uuid import UUID

from .exceptions import (
    NoParticipantsError,
    MissingFieldError,
    InvalidNumberError,
    PercentageMismatchError,
    AmountMismatchError,
    InvalidSplitTypeError,
    DuplicateParticipantError,
)

HUNDRED = Decimal('100')
CENT = Decimal('0.01')

# Currencies without a fractional minor unit
ZERO_DECIMAL_CURRENCIES = frozenset({'JPY', 'KRW', 'ISK'})

# Percentages are distributed in units of 0.01 %
PERCENT_UNIT = CENT
PERCENT_UNITS_TOTAL = 10000


@dataclass(frozen=True)
class SplitParticipant:
    """
    One participant of a split.

    ``amount``, ``percentage`` and ``weight`` are raw values (str, int or
    Decimal) and are only read by the strategy that needs them.
    """
    user_id: UUID
    amount: Any = None
    percentage: Any = None
    weight: Any = None


@dataclass(frozen=True)
class ShareDraft:
    user_id: UUID
    amount: Decimal
    percentage: Decimal


def minor_unit(currency: Optional[str]) -> Decimal:
    """Smallest representable amount for a currency code."""
    if currency and currency.upper() in ZERO_DECIMAL_CURRENCIES:
        return Decimal('1')
    return CENT


def compute_shares(
    *,
    amount: Decimal,
    split_type: str,
    participants: Sequence[SplitParticipant],
    currency: Optional[str] = None
) -> List[ShareDraft]:
    """
    Split ``amount`` among ``participants``.

    Args:
        amount: Positive expense amount
        split_type: One of 'equal', 'percentage', 'custom', 'weighted'
        participants: Participants in the order remainders are handed out
        currency: Currency code, decides the rounding unit

    Returns:
        One ShareDraft per participant, same length and order as input

    Raises:
        InvalidSplitTypeError: Unknown split type
        NoParticipantsError: Empty participant list
        MissingFieldError: A participant lacks the value the strategy needs
        InvalidNumberError: A value is unparseable or out of range
        PercentageMismatchError: Percentages don't sum to exactly 100
        AmountMismatchError: Custom amounts don't sum to the expense amount
        DuplicateParticipantError: The same user appears twice
    """
    strategy = _STRATEGIES.get(split_type)
    if strategy is None:
        raise InvalidSplitTypeError(f"Invalid split type: {split_type!r}")

    if not participants:
        raise NoParticipantsError("At least one participant required")

    seen = set()
    for p in participants:
        if p.user_id in seen:
            raise DuplicateParticipantError(f"User {p.user_id} appears more than once in the split")
        seen.add(p.user_id)

    unit = minor_unit(currency)
    amount = _parse_decimal(amount, 'amount', None)
    if amount % unit != 0:
        raise InvalidNumberError(f"Expense amount {amount} is not a whole multiple of {unit}")

    return strategy(amount, list(participants), unit)


# =============================================================================
# Strategies
# =============================================================================

def _split_equal(amount, participants, unit):
    weights = [Decimal(1)] * len(participants)
    return _weighted_drafts(amount, participants, weights, unit)


def _split_percentage(amount, participants, unit):
    percentages = [
        _parse_decimal(p.percentage, 'percentage', p.user_id, allow_zero=True)
        for p in participants
    ]

    for p, pct in zip(participants, percentages):
        if pct != pct.quantize(PERCENT_UNIT):
            raise InvalidNumberError(
                f"Percentage for user {p.user_id} has more than two decimal places: {pct}"
            )

    total = sum(percentages, Decimal(0))
    if total != HUNDRED:
        raise PercentageMismatchError(f"Percentages must add up to 100, got {total}")

    # Supplied percentages are stored as given; only amounts are distributed
    amount_units = _distribute(int(amount / unit), percentages)
    return [
        ShareDraft(
            user_id=p.user_id,
            amount=(units * unit).quantize(unit),
            percentage=pct.quantize(PERCENT_UNIT),
        )
        for p, units, pct in zip(participants, amount_units, percentages)
    ]


def _split_custom(amount, participants, unit):
    amounts = [
        _parse_decimal(p.amount, 'amount', p.user_id, allow_zero=True)
        for p in participants
    ]

    total = sum(amounts, Decimal(0))
    if total != amount:
        raise AmountMismatchError(
            f"Custom amounts must add up to expense total {amount}, got {total}"
        )

    # Caller-provided amounts are kept verbatim
    percentages = _distribute(PERCENT_UNITS_TOTAL, amounts)
    return [
        ShareDraft(user_id=p.user_id, amount=share, percentage=pct_units * PERCENT_UNIT)
        for p, share, pct_units in zip(participants, amounts, percentages)
    ]


def _split_weighted(amount, participants, unit):
    weights = [_parse_decimal(p.weight, 'weight', p.user_id) for p in participants]
    return _weighted_drafts(amount, participants, weights, unit)


_STRATEGIES = {
    'equal': _split_equal,
    'percentage': _split_percentage,
    'custom': _split_custom,
    'weighted': _split_weighted,
}


# =============================================================================
# Helpers
# =============================================================================

def _weighted_drafts(amount, participants, weights, unit):
    total_units = int(amount / unit)
    amount_units = _distribute(total_units, weights)
    percent_units = _distribute(PERCENT_UNITS_TOTAL, weights)

    return [
        ShareDraft(
            user_id=p.user_id,
            amount=(units * unit).quantize(unit),
            percentage=(pct * PERCENT_UNIT).quantize(PERCENT_UNIT),
        )
        for p, units, pct in zip(participants, amount_units, percent_units)
    ]


def _distribute(total_units: int, weights: Sequence[Decimal]) -> List[int]:
    """
    Split ``total_units`` proportionally to ``weights`` in whole units.

    Every share is rounded down, then the leftover units go one each to
    the participants with the largest fractional remainders, input order
    breaking ties. Zero-weight participants never receive a unit. The
    result always sums to ``total_units``.
    """
    weight_sum = sum(weights, Decimal(0))
    if weight_sum == 0:
        raise InvalidNumberError("Split weights must not all be zero")

    exact = [Decimal(total_units) * w / weight_sum for w in weights]
    shares = [int(e.to_integral_value(rounding=ROUND_DOWN)) for e in exact]

    leftover = total_units - sum(shares)
    candidates = sorted(
        (i for i, w in enumerate(weights) if w > 0),
        key=lambda i: exact[i] - shares[i],
        reverse=True
    )
    for i in candidates[:leftover]:
        shares[i] += 1

    return shares


def _parse_decimal(value, field: str, user_id, allow_zero: bool = False) -> Decimal:
    """
    Parse a raw split value into a Decimal.

    Non-positive values are rejected unless ``allow_zero``, in which case
    only negatives are.
    """
    who = f" for user {user_id}" if user_id is not None else ''

    if value is None or (isinstance(value, str) and not value.strip()):
        raise MissingFieldError(f"{field.capitalize()} required{who}")

    if isinstance(value, bool):
        raise InvalidNumberError(f"Invalid {field}{who}: {value!r}")

    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidNumberError(f"Invalid {field}{who}: {value!r}")

    if not number.is_finite():
        raise InvalidNumberError(f"Invalid {field}{who}: {value!r}")

    if number < 0 or (number == 0 and not allow_zero):
        raise InvalidNumberError(f"{field.capitalize()}{who} must be positive, got {number}")

    return number
