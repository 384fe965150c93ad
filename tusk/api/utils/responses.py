"""JSON responses serialized with orjson.

Every JSON response written through a ``Context``, including error payloads,
is rendered by :class:`ORJSONResponse`.
"""

from typing import Any

import orjson
from pydantic import BaseModel
from starlette.responses import JSONResponse


class ORJSONResponse(JSONResponse):
    """Starlette JSON response rendered with orjson.

    Pydantic models are dumped before rendering and keys are sorted for
    predictable output.
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401 - accepts any JSON-serializable content
        """Render the content as JSON using orjson.

        Args:
            content: The content to serialize to JSON.

        Returns:
            bytes: The JSON-encoded bytes.
        """
        if isinstance(content, BaseModel):
            content = content.model_dump(mode="json")
        return orjson.dumps(content, option=orjson.OPT_SORT_KEYS)
