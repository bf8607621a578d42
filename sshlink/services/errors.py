"""Failures raised while turning a profile into a link and QR image."""


class LinkEncodingError(Exception):
    stage = "encode"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidField(LinkEncodingError, ValueError):
    """Empty or non-ASCII text given to the field encoder."""

    stage = "serialize"

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field


class CompressionFailure(LinkEncodingError):
    stage = "compress"


class PayloadTooLarge(LinkEncodingError):
    """The link does not fit in a version 40 QR code."""

    stage = "qr"


class ImageEncodingFailure(LinkEncodingError):
    stage = "image"
