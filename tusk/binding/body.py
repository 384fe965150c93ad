"""Decoding request bodies into the ``Body`` model.

The decoder is chosen strictly from the declared content type:

- ``application/json``: the document must be an object; keys present in it
  are converted and assigned, absent keys keep their defaults
- ``application/x-www-form-urlencoded`` and ``multipart/form-data``: the
  form is parsed by Starlette and bound like a query string; multipart parts
  larger than ``max_part_size`` are rejected by the parser

A missing or unknown content type is a 400 error. Malformed bodies become a
``ValidationError`` for the ``Body`` group.
"""

import orjson
from pydantic import BaseModel
from starlette import status
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request

from tusk.binding.fields import binding_spec
from tusk.binding.values import assign, bind_values
from tusk.core.constants import BODY_FIELD
from tusk.core.exceptions import HTTPError, TypeMismatchError, ValidationError

CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_FORM_ENCODED = "application/x-www-form-urlencoded"
CONTENT_TYPE_MULTIPART_FORM = "multipart/form-data"

NO_CONTENT_TYPE_MESSAGE = "content-type header was not set on the request"


def media_type(content_type: str) -> str:
    """Return the lower-cased media type without parameters such as charset."""
    return content_type.split(";", 1)[0].strip().lower()


def has_body(request: Request) -> bool:
    """Whether the request declares a body at all."""
    if "transfer-encoding" in request.headers:
        return True
    content_length = request.headers.get("content-length", "0")
    return content_length.isdigit() and int(content_length) > 0


async def bind_json(model: BaseModel, request: Request) -> None:
    """Decode a JSON object body into ``model``.

    Raises:
        ValidationError: If the body is not a JSON object or a value does not
            fit its member
    """
    try:
        document = orjson.loads(await request.body())
    except orjson.JSONDecodeError as exc:
        raise ValidationError(BODY_FIELD, [f"invalid JSON: {exc}"]) from exc

    if not isinstance(document, dict):
        msg = f"expected a JSON object, got {type(document).__name__}"
        raise ValidationError(BODY_FIELD, [msg])

    mismatches: list[TypeMismatchError] = []
    for member in binding_spec(type(model)):
        if member.ignored or member.key not in document:
            continue
        try:
            assign(model, member, document[member.key])
        except TypeMismatchError as exc:
            mismatches.append(exc)
    if mismatches:
        raise ValidationError(BODY_FIELD, mismatches)


async def bind_form(model: BaseModel, request: Request, *, max_part_size: int) -> None:
    """Parse a urlencoded or multipart form body into ``model``.

    Raises:
        ValidationError: If the form cannot be parsed or a value does not fit
            its member
    """
    try:
        form = await request.form(max_part_size=max_part_size)
    except MultiPartException as exc:
        raise ValidationError(BODY_FIELD, [exc.message]) from exc
    except HTTPException as exc:
        # Starlette converts parser errors when the scope carries an app
        raise ValidationError(BODY_FIELD, [exc.detail]) from exc

    mismatches = bind_values(model, form)
    if mismatches:
        raise ValidationError(BODY_FIELD, mismatches)


async def bind_body(model: BaseModel, request: Request, *, max_part_size: int) -> None:
    """Select a decoder from the content type and bind the body into ``model``.

    Args:
        model: The ``Body`` model of the handler
        request: The incoming request
        max_part_size: Largest multipart part accepted, in bytes

    Raises:
        HTTPError: 400 if the content type is missing or not recognized
        ValidationError: If decoding fails
    """
    content_type = request.headers.get("content-type")
    if not content_type:
        raise HTTPError(status.HTTP_400_BAD_REQUEST, NO_CONTENT_TYPE_MESSAGE)

    kind = media_type(content_type)
    if kind == CONTENT_TYPE_JSON:
        await bind_json(model, request)
    elif kind == CONTENT_TYPE_FORM_ENCODED or kind.startswith(CONTENT_TYPE_MULTIPART_FORM):
        await bind_form(model, request, max_part_size=max_part_size)
    else:
        raise HTTPError(
            status.HTTP_400_BAD_REQUEST, f"unknown content type: {content_type!r}"
        )
