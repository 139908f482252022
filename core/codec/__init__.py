"""QR payload codec and classifier."""

from core.codec.payload_codec import encode, encodeSingle, parse, isoTimestamp
from core.codec.payload_classifier import (
    SingleOutcome,
    BulkOutcome,
    Outcome,
    classify,
    describeOutcome
)

__all__ = [
    'encode',
    'encodeSingle',
    'parse',
    'isoTimestamp',
    'SingleOutcome',
    'BulkOutcome',
    'Outcome',
    'classify',
    'describeOutcome'
]
