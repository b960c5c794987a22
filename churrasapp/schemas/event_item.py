"""
Shopping-list item schemas
"""

from typing import Optional

from pydantic import model_validator

from churrasapp.schemas.common import CamelModel, ResponseModel
from churrasapp.schemas.fields import (
    Assignee,
    Category,
    EventRef,
    ItemName,
    Money,
    Quantity,
    Unit,
    UtcDatetime,
    check_item_binding,
)


class EventItemCreate(CamelModel):
    """An item bound to an event, or a reusable template (never both)"""
    event_id: Optional[EventRef] = None
    name: ItemName
    category: Category
    quantity: Quantity
    unit: Unit
    estimated_cost: Money
    actual_cost: Optional[Money] = None
    assigned_to: Assignee = None
    is_purchased: bool = False
    is_template: bool = False

    @model_validator(mode="after")
    def _event_xor_template(self):
        check_item_binding(self.is_template, self.event_id)
        return self


class EventItemUpdate(CamelModel):
    name: ItemName = None
    category: Category = None
    quantity: Quantity = None
    unit: Unit = None
    estimated_cost: Money = None
    actual_cost: Optional[Money] = None
    assigned_to: Assignee = None
    is_purchased: bool = None
    is_template: bool = None


class EventItemResponse(ResponseModel):
    id: str
    event_id: Optional[str] = None
    name: str
    category: str
    quantity: float
    unit: str
    estimated_cost: float
    actual_cost: Optional[float] = None
    assigned_to: Optional[str] = None
    is_purchased: bool
    is_template: bool
    cost_difference: Optional[float] = None
    is_over_budget: bool
    total_estimated_cost: float
    total_actual_cost: Optional[float] = None
    purchase_status: str
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None
