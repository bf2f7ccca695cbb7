"""Input validation for set-valued cloud-account fields."""

from collections import Counter
from collections.abc import Sequence

from cloudaccount.errors import DuplicateValueError


def ensure_unique(values: Sequence[str], field: str) -> None:
    """Reject a set-valued field whose values repeat.

    Raises DuplicateValueError naming `field` and every repeated value.
    """
    duplicates = [value for value, count in Counter(values).items() if count > 1]
    if duplicates:
        raise DuplicateValueError(field, duplicates)
