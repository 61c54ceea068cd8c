from typing import Dict, Union

from app.models.user import Plan

# Plan limits configuration
# Free tier: 3 lifetime generations, watermark forced on every image
PLAN_LIMITS: Dict[str, Dict[str, Union[int, bool]]] = {
    Plan.FREE.value: {
        "max_generations": 3,
        "watermark_required": True,
        "watermark_customizable": False,
    },
    Plan.PREMIUM_MONTHLY.value: {
        "max_generations": -1,  # -1 means unlimited
        "watermark_required": False,
        "watermark_customizable": False,
    },
    Plan.PREMIUM_YEARLY.value: {
        "max_generations": -1,  # -1 means unlimited
        "watermark_required": False,
        "watermark_customizable": True,
    },
}

FREE_GENERATION_LIMIT = 3
WATERMARK_TEXT = "AI Interior Designer"


def get_plan_limit(plan_tier: str, limit_type: str):
    """Get the limit value for a specific plan and limit type."""
    return PLAN_LIMITS.get(plan_tier, PLAN_LIMITS[Plan.FREE.value]).get(limit_type, 0)


def is_metered(plan_tier: str) -> bool:
    return get_plan_limit(plan_tier, "max_generations") != -1


def usage_summary(plan_tier: str, used: int) -> dict:
    """Usage block returned to clients: -1 stands for unlimited."""
    limit = get_plan_limit(plan_tier, "max_generations")
    if limit == -1:
        return {"used": used, "limit": -1, "remaining": -1}
    return {"used": used, "limit": limit, "remaining": max(limit - used, 0)}
