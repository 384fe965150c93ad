"""Binding multi-valued request data into model members.

Query strings, path parameters and form bodies share one set of rules:

- a sequence member receives every value under its key, in the order
  received, and is left untouched when there are none;
- a scalar member receives the first value only, and an empty string leaves
  it untouched, so absent or blank parameters never overwrite defaults.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from pydantic import BaseModel
from starlette.datastructures import ImmutableMultiDict

from tusk.binding.fields import MemberSpec, binding_spec
from tusk.core.constants import QUERY_FIELD, URL_PARAMS_FIELD
from tusk.core.exceptions import TypeMismatchError, ValidationError


class MultiValues(Protocol):
    """Anything exposing every value stored under a key."""

    def getlist(self, key: Any) -> list[Any]: ...  # noqa: ANN401


def assign(model: BaseModel, member: MemberSpec, value: object) -> None:
    """Convert ``value`` and assign it to ``member`` of ``model``.

    Raises:
        TypeMismatchError: If the value does not fit the member type.
    """
    converted = member.convert(value)
    try:
        setattr(model, member.name, converted)
    except ValueError as exc:
        # Models with validate_assignment reject the value on setattr
        raise TypeMismatchError(member.name, member.key, value, member.target) from exc


def bind_values(model: BaseModel, values: MultiValues) -> list[TypeMismatchError]:
    """Bind every non-ignored member of ``model`` from ``values``.

    Args:
        model: The reserved field model to populate
        values: Source of raw values, e.g. query params or form data

    Returns:
        list[TypeMismatchError]: One entry per member whose value could not be
            converted. Members that failed keep their previous value.
    """
    mismatches = []
    for member in binding_spec(type(model)):
        if member.ignored:
            continue

        raw = values.getlist(member.key)
        if not raw:
            continue

        value: object = list(raw) if member.sequence else raw[0]
        if value == "":
            continue

        try:
            assign(model, member, value)
        except TypeMismatchError as exc:
            mismatches.append(exc)
    return mismatches


def _raise_for(group: str, mismatches: Sequence[TypeMismatchError]) -> None:
    if mismatches:
        raise ValidationError(group, mismatches)


def bind_query(model: BaseModel, query: MultiValues) -> None:
    """Bind the query string into the ``Query`` model.

    Raises:
        ValidationError: If any value could not be converted
    """
    _raise_for(QUERY_FIELD, bind_values(model, query))


def bind_url_params(model: BaseModel, params: Mapping[str, Any]) -> None:
    """Bind matched path variables into the ``URLParams`` model.

    Raises:
        ValidationError: If any value could not be converted
    """
    _raise_for(URL_PARAMS_FIELD, bind_values(model, ImmutableMultiDict(params)))
