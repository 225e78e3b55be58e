"""Integer money utilities.

All prices, amounts and balances are whole NT$ units stored as int.
No float, no Decimal.
"""


def bid_cost(amount: int, quantity: int) -> int:
    """Total funds a bid reserves: per-unit amount times quantity."""
    return amount * quantity


def money_to_display(value: int) -> str:
    """Convert an amount to a display string: 2500 -> 'NT$2,500', -300 -> '-NT$300'."""
    if value < 0:
        return f"-NT${-value:,}"
    return f"NT${value:,}"
