"""Subscription plan limits.

Read-only configuration. Enforcement lives where the limited resource is
created (invite issuance for employees). A limit of ``UNLIMITED`` means the
plan has no cap for that resource.
"""

from pydantic import BaseModel

from app.workspaces.models import PlanType

UNLIMITED = -1


class PlanLimits(BaseModel):
    plan: PlanType
    name: str
    max_employees: int
    max_pages: int
    max_channels: int
    ai_token_limit: int
    automation_rule_limit: int


PLANS: dict[PlanType, PlanLimits] = {
    PlanType.starter: PlanLimits(
        plan=PlanType.starter,
        name="Starter",
        max_employees=2,
        max_pages=1,
        max_channels=1,
        ai_token_limit=10_000,
        automation_rule_limit=3,
    ),
    PlanType.pro: PlanLimits(
        plan=PlanType.pro,
        name="Pro",
        max_employees=5,
        max_pages=3,
        max_channels=3,
        ai_token_limit=50_000,
        automation_rule_limit=15,
    ),
    PlanType.advanced: PlanLimits(
        plan=PlanType.advanced,
        name="Advanced",
        max_employees=15,
        max_pages=UNLIMITED,
        max_channels=UNLIMITED,
        ai_token_limit=500_000,
        automation_rule_limit=UNLIMITED,
    ),
    PlanType.enterprise: PlanLimits(
        plan=PlanType.enterprise,
        name="Enterprise",
        max_employees=UNLIMITED,
        max_pages=UNLIMITED,
        max_channels=UNLIMITED,
        ai_token_limit=UNLIMITED,
        automation_rule_limit=UNLIMITED,
    ),
}


def get_plan(plan: PlanType | str | None) -> PlanLimits:
    """Return the limits for ``plan``, falling back to starter for unknown values."""
    try:
        return PLANS[PlanType(plan)]
    except ValueError:
        return PLANS[PlanType.starter]


def remaining_capacity(limit: int, current: int) -> int:
    """How many more resources fit under ``limit``; UNLIMITED stays UNLIMITED."""
    if limit == UNLIMITED:
        return UNLIMITED
    return max(0, limit - current)


def is_at_limit(limit: int, current: int) -> bool:
    return limit != UNLIMITED and current >= limit
