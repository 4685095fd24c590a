"""Declarative GET requests on plain methods."""
from reqdeco.contracts import CallingConvention, Param, Placeholder, ref
from reqdeco.core.config import Settings, settings
from reqdeco.core.context import (
    RequestContext,
    bind,
    default_context,
    get,
    merge,
    mock,
    use_http_client,
)
from reqdeco.core.errors import ConfigurationError, ReqdecoError, ValidationError
from reqdeco.core.loader import load_http_client, load_mock_data
from reqdeco.core.logging import configure_logging
from reqdeco.core.transport import HttpxClient

__all__ = [
    "get", "bind", "merge", "mock", "use_http_client",
    "Param", "Placeholder", "ref",
    "CallingConvention",
    "RequestContext", "default_context",
    "Settings", "settings",
    "ConfigurationError", "ReqdecoError", "ValidationError",
    "load_http_client", "load_mock_data",
    "configure_logging",
    "HttpxClient",
]
