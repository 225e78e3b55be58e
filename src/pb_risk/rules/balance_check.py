from src.pb_common.errors import InsufficientBalanceError
from src.pb_common.money import bid_cost


def check_balance(amount: int, quantity: int, balance: int) -> int:
    """Return the bid cost, or raise InsufficientBalanceError(2002) if it exceeds balance."""
    cost = bid_cost(amount, quantity)
    if cost > balance:
        raise InsufficientBalanceError(cost, balance)
    return cost
