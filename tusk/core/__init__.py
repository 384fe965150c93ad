"""Core infrastructure shared by the binding and API layers.

- **config**: Settings with environment support
- **constants**: Reserved field names and binding defaults
- **context**: Correlation ID management
- **exceptions**: The error taxonomy with status codes and error codes
- **error_context**: Sensitive data sanitization for safe logging
- **logging**: Structured logging with Loguru
- **types**: Type aliases
"""
