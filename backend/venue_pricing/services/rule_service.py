"""Approval workflow for persisted pricing rules."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from venue_pricing.models import PricingRule
from venue_pricing.pricing.types import ApprovalStatus
from venue_pricing.schemas.pricing_rule import RuleStatusAction

logger = logging.getLogger(__name__)

# action -> (statuses it may start from, resulting status, resulting is_active)
_TRANSITIONS: dict[
    RuleStatusAction, tuple[frozenset[ApprovalStatus], ApprovalStatus, bool | None]
] = {
    RuleStatusAction.SUBMIT: (
        frozenset({ApprovalStatus.DRAFT, ApprovalStatus.REJECTED}),
        ApprovalStatus.PENDING_APPROVAL,
        None,
    ),
    RuleStatusAction.APPROVE: (
        frozenset({ApprovalStatus.DRAFT, ApprovalStatus.PENDING_APPROVAL}),
        ApprovalStatus.APPROVED,
        True,
    ),
    RuleStatusAction.REJECT: (
        frozenset({ApprovalStatus.DRAFT, ApprovalStatus.PENDING_APPROVAL}),
        ApprovalStatus.REJECTED,
        False,
    ),
    RuleStatusAction.ARCHIVE: (
        frozenset(
            {
                ApprovalStatus.DRAFT,
                ApprovalStatus.PENDING_APPROVAL,
                ApprovalStatus.APPROVED,
                ApprovalStatus.REJECTED,
            }
        ),
        ApprovalStatus.ARCHIVED,
        False,
    ),
}


async def get_rule(session: AsyncSession, *, rule_id: uuid.UUID) -> PricingRule | None:
    return await session.get(PricingRule, rule_id)


async def change_rule_status(
    session: AsyncSession, *, rule: PricingRule, action: RuleStatusAction
) -> PricingRule:
    """Move ``rule`` one step through the approval workflow.

    Approving also activates the rule; rejecting and archiving deactivate it.
    Submitting leaves ``is_active`` untouched.

    Raises:
        ValueError: the rule's current status does not allow ``action``.
    """
    allowed_from, target, is_active = _TRANSITIONS[action]
    if rule.approval_status not in allowed_from:
        raise ValueError(
            f"Cannot {action.value} a rule in status {rule.approval_status.value}"
        )
    previous = rule.approval_status
    rule.approval_status = target
    if is_active is not None:
        rule.is_active = is_active
    await session.commit()
    await session.refresh(rule)
    logger.info(
        "Rule %s moved from %s to %s", rule.id, previous.value, target.value
    )
    return rule
