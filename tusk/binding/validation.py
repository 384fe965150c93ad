"""Constraint checks for bound field groups.

Constraints are declared on the models themselves with pydantic:
``Field(ge=1)``, ``min_length``, ``field_validator``, ``model_validator``
and required members. Validation runs on a copy; the bound model the handler
sees is left exactly as binding produced it.
"""

import pydantic
from pydantic import BaseModel
from pydantic_core import ErrorDetails

from tusk.core.exceptions import ValidationError


def _message(error: ErrorDetails) -> str:
    location = ".".join(str(part) for part in error["loc"])
    if not location:
        return error["msg"]
    return f"{location}: {error['msg']}"


def validate(group: str, model: BaseModel) -> None:
    """Check every constraint of ``model`` and report all violations at once.

    Args:
        group: The field group being validated, used to tag the messages
        model: The bound model

    Raises:
        ValidationError: If any constraint is violated
    """
    fields = type(model).model_fields
    # Members never bound and without a default are absent from __dict__
    data = {name: value for name, value in vars(model).items() if name in fields}
    try:
        type(model).model_validate(data, by_alias=False, by_name=True)
    except pydantic.ValidationError as exc:
        messages = [_message(error) for error in exc.errors(include_url=False)]
        raise ValidationError(group, messages) from exc
