from src.pb_common.errors import InvalidAmountError


def check_positive(field: str, value: int) -> None:
    """Raise InvalidAmountError(2001) unless value is a positive integer."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidAmountError(field, value)
