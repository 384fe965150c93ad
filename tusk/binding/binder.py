"""Populating and validating a handler's reserved fields for one request."""

from collections.abc import Mapping
from typing import Any

from loguru import logger
from pydantic import BaseModel
from starlette.requests import Request

from tusk.binding.body import bind_body, has_body
from tusk.binding.fields import locate_field
from tusk.binding.validation import validate
from tusk.binding.values import bind_query, bind_url_params
from tusk.core.constants import (
    BODY_FIELD,
    DEFAULT_MULTIPART_MAX_MEMORY,
    QUERY_FIELD,
    RESERVED_FIELDS,
    URL_PARAMS_FIELD,
)


class FieldBinder:
    """Binds ``Query``, ``URLParams`` and ``Body`` in that order.

    Each group is validated right after it is bound, and the first failure
    stops the sequence: a bad query string means path parameters and body are
    never read.

    Args:
        multipart_max_memory: Largest multipart part accepted, in bytes
    """

    def __init__(self, *, multipart_max_memory: int = DEFAULT_MULTIPART_MAX_MEMORY) -> None:
        self.multipart_max_memory = multipart_max_memory

    def locate(self, handler: object) -> dict[str, BaseModel]:
        """Find all reserved fields of ``handler``.

        Shapes are checked for every field before any request data is read,
        so a declaration mistake surfaces whatever the request contains.

        Raises:
            BadFieldError: If a reserved field is declared incorrectly
        """
        located = {name: locate_field(handler, name) for name in RESERVED_FIELDS}
        return {name: model for name, model in located.items() if model is not None}

    async def bind(
        self, handler: object, request: Request, url_params: Mapping[str, Any]
    ) -> None:
        """Bind and validate every reserved field ``handler`` declares.

        Args:
            handler: The per-request handler instance
            request: The incoming request
            url_params: Path variables extracted by the route matcher

        Raises:
            BadFieldError: If a reserved field is declared incorrectly
            ValidationError: If binding or validation of a group fails
            HTTPError: If the body content type is missing or unknown
        """
        fields = self.locate(handler)

        if (query := fields.get(QUERY_FIELD)) is not None:
            bind_query(query, request.query_params)
            validate(QUERY_FIELD, query)

        if (params := fields.get(URL_PARAMS_FIELD)) is not None:
            bind_url_params(params, url_params)
            validate(URL_PARAMS_FIELD, params)

        if (body := fields.get(BODY_FIELD)) is not None:
            if has_body(request):
                await bind_body(body, request, max_part_size=self.multipart_max_memory)
            else:
                logger.debug("Request has no body, skipping body decoding")
            validate(BODY_FIELD, body)
