"""Demo application built on the Tusk router.

Shows the intended wiring: logging is configured first, middlewares are
registered outermost first, and every route gets a fresh handler per request
whose ``Query``, ``URLParams`` and ``Body`` are bound before ``handle`` runs.
"""

from typing import Annotated

from loguru import logger
from pydantic import BaseModel, Field
from starlette import status

from tusk.api.context import Context
from tusk.api.middleware import (
    request_context_middleware,
    request_logging_middleware,
    security_headers_middleware,
)
from tusk.api.router import Router
from tusk.core.config import Settings, get_settings
from tusk.core.logging import setup_logging


class ItemParams(BaseModel):
    item_id: int = 0


class ItemQuery(BaseModel):
    verbose: bool = False
    tags: list[str] = Field(default_factory=list, alias="tag")


class NewItem(BaseModel):
    name: Annotated[str, Field(min_length=1, max_length=100)] = ""
    quantity: Annotated[int, Field(ge=1, le=1000)] = 1
    tags: list[str] = Field(default_factory=list)


class HealthHandler:
    async def handle(self, ctx: Context) -> None:
        ctx.write_json(status.HTTP_200_OK, {"status": "healthy"})


class InfoHandler:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    async def handle(self, ctx: Context) -> None:
        ctx.write_json(
            status.HTTP_200_OK,
            {
                "app_name": self.settings.app_name,
                "version": self.settings.app_version,
                "environment": self.settings.environment,
                "debug": self.settings.debug,
            },
        )


class GetItemHandler:
    URLParams: ItemParams
    Query: ItemQuery

    async def handle(self, ctx: Context) -> None:
        item: dict[str, object] = {"id": self.URLParams.item_id, "name": f"item-{self.URLParams.item_id}"}
        if self.Query.verbose:
            item["tags"] = self.Query.tags
        ctx.write_json(status.HTTP_200_OK, item)


class CreateItemHandler:
    Body: NewItem

    async def handle(self, ctx: Context) -> None:
        logger.info("Creating item {}", self.Body.name)
        ctx.write_json(status.HTTP_201_CREATED, self.Body)


def create_app(settings: Settings | None = None) -> Router:
    """Create and configure the demo router.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().

    Returns:
        Router: Configured router, usable as an ASGI application.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)

    router = Router(settings)

    # First registered runs outermost
    router.use(
        security_headers_middleware(),
        request_context_middleware,
        request_logging_middleware(settings.log_config),
    )

    router.get("/health", lambda _ctx: HealthHandler())
    router.get("/info", lambda _ctx: InfoHandler(settings))
    router.get("/items/{item_id:int}", lambda _ctx: GetItemHandler())
    router.post("/items", lambda _ctx: CreateItemHandler())

    logger.info("Application configured - {} v{}", settings.app_name, settings.app_version)
    return router


app = create_app()
