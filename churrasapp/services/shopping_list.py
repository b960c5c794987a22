"""
Starter shopping list derived from the headcount.

Costs are unit costs in centavos (8000 == R$ 80,00).
"""

from typing import Any, Dict, List, Optional

BASIC_EVENT_TEMPLATE = [
    {"name": "Picanha", "category": "meat", "unit": "kg", "quantity_per_person": 0.4, "unit_cost": 8000},
    {"name": "Cerveja", "category": "drinks", "unit": "unit", "quantity_per_person": 2, "unit_cost": 500},
    # 1 kg for every 4 people
    {"name": "Carvão", "category": "charcoal", "unit": "kg", "quantity_per_person": 0.25, "unit_cost": 1500},
]


def calculate_event_items(estimated_participants: Optional[int]) -> List[Dict[str, Any]]:
    """Scale the basic template to ``estimated_participants`` people.

    Quantities are rounded to two decimals; ``total_cost`` is quantity
    times unit cost. Returns an empty list for a missing or non-positive
    headcount.
    """
    if not estimated_participants or estimated_participants <= 0:
        return []

    items = []
    for entry in BASIC_EVENT_TEMPLATE:
        quantity = round(entry["quantity_per_person"] * estimated_participants, 2)
        items.append({
            "name": entry["name"],
            "category": entry["category"],
            "quantity": quantity,
            "unit": entry["unit"],
            "estimated_cost": entry["unit_cost"],
            "total_cost": round(quantity * entry["unit_cost"], 2),
        })
    return items


def format_currency(cents: float) -> str:
    """Format centavos as Brazilian reais, e.g. 123456 -> 'R$ 1.234,56'"""
    formatted = f"{cents / 100:,.2f}"
    return "R$ " + formatted.replace(",", "_").replace(".", ",").replace("_", ".")
