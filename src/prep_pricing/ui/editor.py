"""
Line editor helpers - turn the Streamlit ``data_editor`` frame into shipment items.

Rows added in the editor arrive with blank cells as NaN/None. A row without a
quantity is still being typed and is skipped; a blank pack size means 1.
"""
import pandas as pd

from ..engine.models import ShipmentItemInput
from ..engine.tier_resolver import validate_quantity


def _blank(value) -> bool:
    return value is None or bool(pd.isna(value)) or str(value).strip() == ''


def items_from_frame(frame: pd.DataFrame) -> list[ShipmentItemInput]:
    """
    Build shipment items from the edited lines table.

    Raises:
        InvalidQuantityOrPackOf: a filled-in quantity or pack size that is not
            a positive whole number
    """
    items = []
    for number, (_, row) in enumerate(frame.iterrows(), start=1):
        quantity = row.get("Quantity")
        if _blank(quantity):
            continue
        description = row.get("Description")
        pack_of = row.get("Pack Of")
        items.append(ShipmentItemInput(
            description="Item" if _blank(description) else str(description).strip(),
            quantity=validate_quantity(quantity, f"Line {number} quantity"),
            pack_of=1 if _blank(pack_of) else validate_quantity(pack_of, f"Line {number} pack size"),
        ))
    return items
