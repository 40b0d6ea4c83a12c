import pandas as pd
import pytest

from prep_pricing.engine.errors import InvalidQuantityOrPackOf
from prep_pricing.ui.editor import items_from_frame


def test_new_row_without_pack_size_defaults_to_one():
    """Rows added in the editor come back with NaN in untouched cells."""
    frame = pd.DataFrame([
        {"Description": "Item 1", "Quantity": 10, "Pack Of": 3},
        {"Description": "Item 2", "Quantity": 4, "Pack Of": None},
    ])
    items = items_from_frame(frame)
    assert [(i.description, i.quantity, i.pack_of) for i in items] == [
        ("Item 1", 10, 3),
        ("Item 2", 4, 1),
    ]


def test_rows_still_being_typed_are_skipped():
    frame = pd.DataFrame([
        {"Description": None, "Quantity": 5.0, "Pack Of": float("nan")},
        {"Description": "Half done", "Quantity": float("nan"), "Pack Of": 2},
    ])
    items = items_from_frame(frame)
    assert len(items) == 1
    assert items[0].description == "Item"
    assert items[0].quantity == 5
    assert items[0].pack_of == 1


@pytest.mark.parametrize("row", [
    {"Description": "Widget", "Quantity": 2.5, "Pack Of": 1},
    {"Description": "Widget", "Quantity": 3, "Pack Of": 0},
])
def test_bad_counts_rejected(row):
    with pytest.raises(InvalidQuantityOrPackOf):
        items_from_frame(pd.DataFrame([row]))
