from src.pb_common.errors import PriceTooLowError


def check_price_floor(amount: int, threshold: int) -> None:
    """Raise PriceTooLowError(4001) if amount is below the current threshold."""
    if amount < threshold:
        raise PriceTooLowError(amount, threshold)
