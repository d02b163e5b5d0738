from src.pm_common.errors import InvalidAmountError


def check_non_negative(field: str, value: int) -> None:
    """Raise InvalidAmountError(4001) if value < 0."""
    if value < 0:
        raise InvalidAmountError(field, value)
