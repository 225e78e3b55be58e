from src.pb_common.errors import QuantityCapExceededError


def check_quantity_cap(quantity: int, held_quantity: int, cap: int) -> None:
    """Raise QuantityCapExceededError(4002) if held + requested would pass the cap."""
    if held_quantity + quantity > cap:
        raise QuantityCapExceededError(quantity, max(0, cap - held_quantity), cap)
