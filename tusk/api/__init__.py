"""HTTP layer of Tusk, built on Starlette.

Key components:
- **router**: Route registration and the per-request lifecycle
- **context**: Request context and the write-once response state
- **dispatch**: Turning errors into JSON responses
- **middleware**: Middleware chain and bundled middlewares
- **schemas**: Pydantic models of the error payloads
- **utils**: High-performance JSON serialization with orjson
- **main**: Demo application factory
"""
