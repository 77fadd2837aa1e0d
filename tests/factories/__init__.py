from .line_items import (
    line_items,
    order_row,
    product,
    sample_line,
    SCENARIO_LINE,
)

__all__ = [
    "line_items",
    "order_row",
    "product",
    "sample_line",
    "SCENARIO_LINE",
]
