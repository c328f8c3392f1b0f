"""Lunos Python SDK."""

from .client import LunosClient
from .config import ClientConfig, RequestOptions
from .errors import ErrorKind, LunosError
from .pipeline import RawResponse, RequestDescriptor, RequestPipeline
from .retry import RetryPolicy
from .streaming import SSEDecoder, StreamFrame, StreamResult, process_stream, stream_to_string
from .transport import ByteStream, CancellationToken

__all__ = [
    "ByteStream",
    "CancellationToken",
    "ClientConfig",
    "ErrorKind",
    "LunosClient",
    "LunosError",
    "RawResponse",
    "RequestDescriptor",
    "RequestOptions",
    "RequestPipeline",
    "RetryPolicy",
    "SSEDecoder",
    "StreamFrame",
    "StreamResult",
    "process_stream",
    "stream_to_string",
]
