"""Core application constants."""

# Time constants
MILLISECONDS_PER_SECOND = 1000

# Reserved handler attributes, case-sensitive
QUERY_FIELD = "Query"
URL_PARAMS_FIELD = "URLParams"
BODY_FIELD = "Body"
RESERVED_FIELDS = (QUERY_FIELD, URL_PARAMS_FIELD, BODY_FIELD)

# Alias that excludes a member from binding
IGNORE = "-"

# Binding
DEFAULT_MULTIPART_MAX_MEMORY = 1 << 20  # 1 MiB

# Security and redaction
REDACTED = "[REDACTED]"
