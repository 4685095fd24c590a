"""Runtime: metadata, transport, pipeline, merge and the request context."""
from reqdeco.core.context import RequestContext, default_context
from reqdeco.core.errors import ConfigurationError, ReqdecoError, ValidationError
from reqdeco.core.metadata import MetadataStore
from reqdeco.core.transport import HttpxClient

__all__ = [
    "RequestContext", "default_context",
    "ConfigurationError", "ReqdecoError", "ValidationError",
    "MetadataStore",
    "HttpxClient",
]
