"""Public contracts for declared requests."""
from reqdeco.contracts.request import (
    InvocationState,
    MockEntry,
    Param,
    ParamSpec,
    Placeholder,
    RequestDescriptor,
    RequestEntry,
    ResponseSpec,
    as_list,
    ref,
)
from reqdeco.contracts.transport import CallingConvention, HttpClient, TransportBinding

__all__ = [
    "InvocationState", "MockEntry",
    "Param", "ParamSpec", "Placeholder", "ref",
    "RequestDescriptor", "RequestEntry", "ResponseSpec",
    "as_list",
    "CallingConvention", "HttpClient", "TransportBinding",
]
