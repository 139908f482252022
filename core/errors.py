"""
QR Exchange Error Module.

Defines the error taxonomy for QR export/import.
Every error is recoverable: the controller turns it into a user-facing
message and returns to idle without touching stored records.
"""

from typing import Optional


class QrExchangeError(Exception):
    """
    Base class for all QR exchange errors.

    Attributes:
        userMessage: Message suitable for showing to the user.
    """

    defaultMessage = "The QR code could not be processed."

    def __init__(self, detail: str = "", userMessage: Optional[str] = None):
        self.detail = detail
        self.userMessage = userMessage or self.defaultMessage
        super().__init__(detail or self.userMessage)


class EmptySelection(QrExchangeError):
    """Encode was requested with nothing selected."""

    defaultMessage = (
        "Please select at least one medicine or appointment "
        "to generate the QR code."
    )


class MalformedPayload(QrExchangeError):
    """Decoded text is not well-formed JSON."""

    defaultMessage = (
        "The QR code was read but does not contain valid data.\n"
        "Make sure it was generated by this application."
    )


class UnrecognizedShape(QrExchangeError):
    """Decoded JSON has no recognizable payload shape."""

    defaultMessage = "The QR code does not contain valid application data."


class InvalidBulkPayload(QrExchangeError):
    """Bulk export with both record sequences empty."""

    defaultMessage = "The QR code export contains no medicines or appointments."


class NoCodeFound(QrExchangeError):
    """No QR code could be located in the image."""

    defaultMessage = (
        "No QR code could be read from the image.\n"
        "Make sure the code is not damaged or blurred."
    )


class UnreadableImage(QrExchangeError):
    """Image data is empty, corrupt or in an unsupported format."""

    defaultMessage = "Please select an image file (PNG, JPG, etc.)."


class PayloadTooLarge(QrExchangeError):
    """Payload does not fit in a QR code at the configured error correction."""

    defaultMessage = (
        "Too many records selected to fit in one QR code. "
        "Please select fewer items."
    )


class PatientContextError(QrExchangeError):
    """No active patient the records could belong to."""

    defaultMessage = "Select a patient before importing records."


class RecordValidationFailure(QrExchangeError):
    """
    A record failed field validation.

    Attributes:
        kind: Record kind value ("medicine" or "appointment").
        field: Name of the offending field.
        index: Position of the record inside a bulk sequence, if any.
    """

    defaultMessage = "The imported data contains invalid records. Nothing was imported."

    def __init__(
        self,
        kind: str,
        field: str,
        reason: str,
        index: Optional[int] = None
    ):
        self.kind = kind
        self.field = field
        self.index = index
        position = f" #{index + 1}" if index is not None else ""
        super().__init__(f"{kind}{position}: '{field}' {reason}")


class RecordStoreError(QrExchangeError):
    """Records could not be written to persistent storage."""

    defaultMessage = "The records could not be saved. Nothing was changed."
