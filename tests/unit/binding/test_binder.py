"""Unit tests for tusk/binding/binder.py."""

from collections.abc import Callable

import pytest
from pydantic import BaseModel, Field
from pytest_mock import MockerFixture
from starlette.requests import Request

from tusk.binding.binder import FieldBinder
from tusk.core.exceptions import BadFieldError, ValidationError


class Paging(BaseModel):
    page: int = Field(default=1, ge=1)


class ItemParams(BaseModel):
    item_id: int = 0


class NewItem(BaseModel):
    name: str


class FullHandler:
    Query: Paging
    URLParams: ItemParams
    Body: NewItem

    async def handle(self, ctx: object) -> None:
        pass


class BrokenBodyHandler:
    Query: Paging
    Body: dict[str, str]

    async def handle(self, ctx: object) -> None:
        pass


@pytest.mark.unit
class TestFieldBinder:
    """Test the bind-then-validate sequence."""

    def test_locate_only_declared(self) -> None:
        """Only declared reserved fields are returned."""

        class QueryOnly:
            Query: Paging

        located = FieldBinder().locate(QueryOnly())

        assert list(located) == ["Query"]

    async def test_binds_all_groups(self, make_request: Callable[..., Request]) -> None:
        """Query, URLParams and Body are all populated."""
        handler = FullHandler()
        request = make_request(
            "POST",
            query_string=b"page=2",
            body=b'{"name": "mug"}',
            headers={"content-type": "application/json", "content-length": "15"},
        )

        await FieldBinder().bind(handler, request, {"item_id": 9})

        assert handler.Query.page == 2
        assert handler.URLParams.item_id == 9
        assert handler.Body.name == "mug"

    async def test_query_failure_stops_sequence(
        self, make_request: Callable[..., Request], mocker: MockerFixture
    ) -> None:
        """A bad query string means later groups are never read."""
        bind_url_params = mocker.patch("tusk.binding.binder.bind_url_params")
        bind_body = mocker.patch("tusk.binding.binder.bind_body")
        request = make_request("POST", query_string=b"page=0")

        with pytest.raises(ValidationError) as exc_info:
            await FieldBinder().bind(FullHandler(), request, {"item_id": 1})

        assert exc_info.value.group == "Query"
        bind_url_params.assert_not_called()
        bind_body.assert_not_called()

    async def test_url_params_failure_stops_body(
        self, make_request: Callable[..., Request], mocker: MockerFixture
    ) -> None:
        """A bad path parameter means the body is never read."""
        bind_body = mocker.patch("tusk.binding.binder.bind_body")

        with pytest.raises(ValidationError) as exc_info:
            await FieldBinder().bind(FullHandler(), make_request("POST"), {"item_id": "x"})

        assert exc_info.value.group == "URLParams"
        bind_body.assert_not_called()

    async def test_shape_fault_before_request_data(
        self, make_request: Callable[..., Request]
    ) -> None:
        """A bad Body declaration wins over a bad query string."""
        request = make_request("POST", query_string=b"page=0")

        with pytest.raises(BadFieldError, match="'Body' field of 'BrokenBodyHandler'"):
            await FieldBinder().bind(BrokenBodyHandler(), request, {})

    async def test_no_body_still_validated(
        self, make_request: Callable[..., Request], mocker: MockerFixture
    ) -> None:
        """Without a body decoding is skipped but Body constraints still apply."""
        bind_body = mocker.patch("tusk.binding.binder.bind_body")

        with pytest.raises(ValidationError) as exc_info:
            await FieldBinder().bind(FullHandler(), make_request("POST"), {})

        assert exc_info.value.group == "Body"
        assert exc_info.value.errors == ["name: Field required"]
        bind_body.assert_not_called()

    async def test_multipart_threshold_threaded(
        self, make_request: Callable[..., Request], mocker: MockerFixture
    ) -> None:
        """The configured multipart threshold reaches the body decoder."""
        bind_body = mocker.patch("tusk.binding.binder.bind_body")
        mocker.patch("tusk.binding.binder.validate")
        request = make_request("POST", headers={"content-length": "4"}, body=b"name")

        await FieldBinder(multipart_max_memory=2048).bind(FullHandler(), request, {})

        assert bind_body.call_args.kwargs["max_part_size"] == 2048
