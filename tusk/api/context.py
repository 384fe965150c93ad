"""Per-request context handed to providers, middlewares and handlers."""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

import orjson
from starlette.datastructures import FormData, MutableHeaders, QueryParams
from starlette.requests import Request
from starlette.responses import Response

from tusk.api.utils.responses import ORJSONResponse
from tusk.core.constants import DEFAULT_MULTIPART_MAX_MEMORY
from tusk.core.exceptions import ResponseAlreadyWrittenError
from tusk.core.types import JsonValue


class ResponseState:
    """The single response of a request.

    Handlers and the error dispatcher write through this object. The first
    write wins; the dispatcher checks ``written`` and stays silent after it,
    while a second write from handler code raises.
    """

    def __init__(self) -> None:
        self._response: Response | None = None
        # Applied to the final response, whoever wrote it
        self.headers = MutableHeaders()

    @property
    def written(self) -> bool:
        return self._response is not None

    @property
    def status_code(self) -> int | None:
        return self._response.status_code if self._response is not None else None

    def write(self, response: Response) -> None:
        """Store ``response`` as the response of this request.

        Raises:
            ResponseAlreadyWrittenError: If a response was already written
        """
        if self._response is not None:
            msg = f"response already written with status {self._response.status_code}"
            raise ResponseAlreadyWrittenError(msg)
        self._response = response

    def to_response(self) -> Response:
        """Build the response to flush; an empty 200 when nothing was written."""
        response = self._response if self._response is not None else Response()
        for key, value in self.headers.items():
            response.headers[key] = value
        return response


class Context:
    """Request, matched path variables and response state of one request.

    Args:
        request: The incoming request
        url_params: Path variables extracted by the route matcher; defaults
            to ``request.path_params``
    """

    def __init__(self, request: Request, url_params: Mapping[str, Any] | None = None) -> None:
        self.request = request
        self.url_params: Mapping[str, Any] = MappingProxyType(
            dict(request.path_params if url_params is None else url_params)
        )
        self.response = ResponseState()

    @property
    def query(self) -> QueryParams:
        return self.request.query_params

    async def read_json(self) -> JsonValue:
        """Decode the request body as JSON."""
        return orjson.loads(await self.request.body())

    async def read_form(self, *, max_part_size: int = DEFAULT_MULTIPART_MAX_MEMORY) -> FormData:
        """Parse the request body as a urlencoded or multipart form."""
        return await self.request.form(max_part_size=max_part_size)

    def write_json(self, status_code: int, content: Any) -> None:  # noqa: ANN401 - any JSON-serializable content
        """Write ``content`` as the JSON response of this request."""
        self.response.write(ORJSONResponse(content, status_code=status_code))

    def write(self, response: Response) -> None:
        """Write an arbitrary Starlette response."""
        self.response.write(response)
