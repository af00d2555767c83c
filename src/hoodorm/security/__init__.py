"""Credential masking for connection sources and logged statements."""

from .dsns import DSNConfig, parse_dsn, redact_source
from .redaction import redact_conninfo, redact_params

__all__ = ["DSNConfig", "parse_dsn", "redact_conninfo", "redact_params", "redact_source"]
