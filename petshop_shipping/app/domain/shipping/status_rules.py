"""
Shipment status transition rules.

Statuses move forward along Pending → Processing → Shipped → Out for Delivery
→ Delivered. Returning, Returned and Cancelled may be chosen at any point.

This check is advisory: the backend re-validates every transition it
persists.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from petshop_shipping.app.core.config import settings
from petshop_shipping.app.core.exceptions import InvalidStatusTransitionError
from petshop_shipping.app.models.shipment_enums import (
    DEFAULT_STATUS,
    Ordered,
    ShipmentStatus,
    Special,
    Unrecognized,
    position_of,
)

logger = logging.getLogger("petshop_shipping.status_rules")

BACKWARD_HINT = "(cannot select - backward movement)"


@dataclass(frozen=True)
class TransitionVerdict:
    """
    Outcome of a transition check.

    ``unconstrained`` marks verdicts where the current status has no position
    on the progression (special or unrecognized), so ordering was not checked.
    """
    current: str
    proposed: str
    allowed: bool
    unconstrained: bool = False
    reason: Optional[str] = None


def _label(value) -> str:
    if value is None or value == "":
        return DEFAULT_STATUS.value
    if isinstance(value, ShipmentStatus):
        return value.value
    return str(value)


def evaluate_transition(current, proposed, strict_special_exit: Optional[bool] = None) -> TransitionVerdict:
    """
    Decide whether ``current`` may move to ``proposed``.

    Args:
        current: Order's current status (missing means Pending)
        proposed: Requested status
        strict_special_exit: Reject leaving a special status for the
            progression; defaults to the ``strict_special_exit`` setting

    Returns:
        TransitionVerdict
    """
    if strict_special_exit is None:
        strict_special_exit = settings.strict_special_exit

    current_label = _label(current)
    proposed_label = _label(proposed)
    current_pos = position_of(current)
    proposed_pos = position_of(proposed)

    if isinstance(proposed_pos, Special):
        return TransitionVerdict(current_label, proposed_label, allowed=True)

    if isinstance(proposed_pos, Unrecognized):
        return TransitionVerdict(
            current_label,
            proposed_label,
            allowed=False,
            reason=f"'{proposed_label}' is not a valid shipment status.",
        )

    if isinstance(current_pos, Ordered):
        if proposed_pos >= current_pos:
            return TransitionVerdict(current_label, proposed_label, allowed=True)
        return TransitionVerdict(
            current_label,
            proposed_label,
            allowed=False,
            reason=(
                f"Cannot move shipment from '{current_label}' back to '{proposed_label}'. "
                "Status can only move forward in the shipping process."
            ),
        )

    # Current status has no progression position
    if strict_special_exit and isinstance(current_pos, Special):
        return TransitionVerdict(
            current_label,
            proposed_label,
            allowed=False,
            unconstrained=True,
            reason=(
                f"Cannot move shipment from '{current_label}' to '{proposed_label}'. "
                "A returning, returned or cancelled shipment cannot re-enter the shipping process."
            ),
        )

    logger.warning(
        "Status transition not ordered: current status has no progression position",
        extra={"current_status": current_label, "proposed_status": proposed_label}
    )
    return TransitionVerdict(current_label, proposed_label, allowed=True, unconstrained=True)


def is_valid_transition(current, proposed) -> bool:
    return evaluate_transition(current, proposed).allowed


def check_transition(current, proposed) -> TransitionVerdict:
    """
    Raise if the transition is not allowed.

    Raises:
        InvalidStatusTransitionError: message names both statuses
    """
    verdict = evaluate_transition(current, proposed)
    if not verdict.allowed:
        raise InvalidStatusTransitionError(verdict.current, verdict.proposed, message=verdict.reason)
    return verdict


@dataclass(frozen=True)
class StatusOption:
    status: ShipmentStatus
    selectable: bool
    label: str


def status_options(current) -> List[StatusOption]:
    """Every status, flagged selectable or not from ``current``."""
    options = []
    for status in ShipmentStatus:
        selectable = evaluate_transition(current, status).allowed
        label = status.value if selectable else f"{status.value} {BACKWARD_HINT}"
        options.append(StatusOption(status=status, selectable=selectable, label=label))
    return options
