"""Per-session shopping plans and the product-click reminder flow"""

import logging
from abc import ABC, abstractmethod
from functools import lru_cache

from smart_shopper.core.vocabulary import icon_for
from smart_shopper.schemas.chat import (
    ApiResponse,
    MessageBlock,
    MessageData,
    OptionItem,
    OptionsBlock,
    OptionsData,
    ShoppingPlan,
)

logger = logging.getLogger(__name__)

MAX_REMINDER_OPTIONS = 4


class PlanStore(ABC):
    @abstractmethod
    def get(self, session_id: str) -> ShoppingPlan | None: ...

    @abstractmethod
    def set(self, session_id: str, plan: ShoppingPlan) -> None: ...

    @abstractmethod
    def delete(self, session_id: str) -> None: ...


class InMemoryPlanStore(PlanStore):
    """Process-local plans; lost on restart and not shared between workers"""

    def __init__(self):
        self._plans: dict[str, ShoppingPlan] = {}

    def get(self, session_id: str) -> ShoppingPlan | None:
        return self._plans.get(session_id)

    def set(self, session_id: str, plan: ShoppingPlan) -> None:
        self._plans[session_id] = plan

    def delete(self, session_id: str) -> None:
        self._plans.pop(session_id, None)


def match_plan_item(plan: ShoppingPlan, clicked: str) -> str | None:
    """
    First unselected plan item matching a clicked product's category/name.

    An item matches when it is contained in the clicked text, or when the
    first word of the clicked text is contained in the item.
    """
    clicked = clicked.strip().lower()
    if not clicked:
        return None
    first_word = clicked.split()[0]
    for item in plan.remaining():
        lowered = item.lower()
        if lowered in clicked or first_word in lowered:
            return item
    return None


def option_value(item: str) -> str:
    return "_".join(item.lower().split())


class ShoppingPlanService:
    def __init__(self, store: PlanStore):
        self.store = store

    def get(self, session_id: str) -> ShoppingPlan | None:
        return self.store.get(session_id)

    def adopt(self, session_id: str, plan: ShoppingPlan) -> ShoppingPlan | None:
        plan = plan.normalized()
        if not plan.items:
            return None
        self.store.set(session_id, plan)
        logger.info(f"Stored shopping plan for session {session_id}: {plan.items}")
        return plan

    def record_click(
        self,
        session_id: str | None,
        category: str | None = None,
        name: str | None = None,
    ) -> ApiResponse:
        """Mark the matching plan item selected and remind about what is left"""
        no_reminder = ApiResponse(has_reminder=False)
        if not session_id:
            return no_reminder

        plan = self.store.get(session_id)
        if plan is None or not plan.items:
            return no_reminder

        matched = match_plan_item(plan, category or name or "")
        if matched is None:
            return no_reminder

        plan.selected_items.append(matched)
        remaining = plan.remaining()

        if not remaining:
            self.store.delete(session_id)
            logger.info(f"Shopping plan completed for session {session_id}")
            return ApiResponse(
                session_id=session_id,
                has_reminder=True,
                response=MessageBlock(
                    data=MessageData(
                        text=(
                            "🎊 **Congratulations!** You've completed your shopping list!\n\n"
                            f"You've selected items for: {', '.join(plan.items)}.\n\n"
                            "Is there anything else I can help you with?"
                        ),
                        format="markdown",
                    )
                ),
            )

        self.store.set(session_id, plan)
        listing = "\n".join(f"{i}. {item}" for i, item in enumerate(remaining, start=1))
        return ApiResponse(
            session_id=session_id,
            has_reminder=True,
            response=[
                MessageBlock(
                    data=MessageData(
                        text=(
                            f"Great choice on the **{matched}**! 🎉\n\n"
                            f"You still have **{len(remaining)}** more items to complete your setup:\n"
                            f"{listing}\n\n"
                            "Would you like to continue with your shopping plan?"
                        ),
                        format="markdown",
                    )
                ),
                OptionsBlock(
                    data=OptionsData(
                        message="Continue with:",
                        options=[
                            OptionItem(label=f"Show me {item}", value=option_value(item), icon=icon_for(item))
                            for item in remaining[:MAX_REMINDER_OPTIONS]
                        ],
                        allow_skip=True,
                    )
                ),
            ],
        )


@lru_cache
def get_plan_store() -> PlanStore:
    return InMemoryPlanStore()


def get_plan_service() -> ShoppingPlanService:
    return ShoppingPlanService(get_plan_store())
