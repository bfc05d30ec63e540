from rowstream.data import (
    AcquisitionFailure,
    Context,
    CursorCreationFailure,
    InvalidParameters,
    RowstreamError,
    StreamFailure,
)
from rowstream.service import CursorItem, CursorProvider

__all__ = (
    "AcquisitionFailure",
    "Context",
    "CursorCreationFailure",
    "CursorItem",
    "CursorProvider",
    "InvalidParameters",
    "RowstreamError",
    "StreamFailure",
)
