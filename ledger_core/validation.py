"""Local precondition checks run before any network call."""

from typing import Callable, List

from .errors import ValidationError

PAYMENT_REQUIRED_MESSAGE = "one of `.set_payment()` or `.set_query_payment()` is required"


def run_validation(subject, check: Callable[[List[str]], None]) -> None:
    """Collect every violated precondition from ``check`` and raise them together."""
    errors: List[str] = []
    check(errors)
    if errors:
        raise ValidationError(errors, subject=type(subject).__name__)


def validate_query(builder, check_payment: bool = True) -> None:
    """Validate ``builder``: payment presence (unless suppressed), then its kind's own checks."""

    def check(errors: List[str]) -> None:
        if (
            check_payment
            and builder._is_payment_required()
            and not builder._get_header().has_payment()
        ):
            errors.append(PAYMENT_REQUIRED_MESSAGE)
        builder._do_local_validate(errors)

    run_validation(builder, check)
