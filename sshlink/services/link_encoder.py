"""Connection link encoder.

Turns a ConnectionProfile into the ``sn://ssh?...`` link the mobile client
imports:

    serialize_profile -> compress_payload -> encode_text -> build_link

The serialized layout is the client's own object format and has to match it
byte for byte. There is no handshake and nothing on our side can check the
result, so the whole layout lives in PROFILE_LAYOUT below.
"""
import base64
import struct
import zlib
from dataclasses import dataclass

from sshlink.models.connection_profile import ConnectionProfile, check_ascii_field
from sshlink.services.errors import CompressionFailure, InvalidField
from sshlink.services.qr_generator import QrImage, render_qr


LINK_SCHEME = "sn://ssh?"

# Same level flate2's Compression::default() uses.
COMPRESSION_LEVEL = 6

# The client's decoder accepts unpadded base64url; we never emit '='.
BASE64_PADDING = False

HEADER = b"\x00\x00\x00\x00"
RESERVED = b"\x00\x00"
MARKER_A = b"\x01\x00\x00\x00"
MARKER_B = b"\x81\x01\x00\x00\x00\xa1"
TRAILER = b"\x00\x00\x00\x00"

# (kind, source) in wire order.
#   raw   - fixed bytes
#   field - profile attribute through encode_field
#   u16   - profile attribute packed little-endian
#   title - profile title as plain ASCII
PROFILE_LAYOUT = (
    ("raw", HEADER),
    ("field", "server_address"),
    ("u16", "port"),
    ("raw", RESERVED),
    ("field", "username"),
    ("raw", MARKER_A),
    ("field", "password"),
    ("raw", MARKER_B),
    ("title", None),
    ("raw", TRAILER),
)


def encode_field(value: str, name: str = "value") -> bytes:
    """Encode one string field for the client.

    The last byte gets 0x80 added to it; the client reads bytes until it sees
    one with the high bit set.
    """
    check_ascii_field(name, value)
    data = bytearray(value.encode("ascii"))
    data[-1] += 0x80
    return bytes(data)


def serialize_profile(profile: ConnectionProfile) -> bytes:
    out = bytearray()
    for kind, source in PROFILE_LAYOUT:
        if kind == "raw":
            out += source
        elif kind == "field":
            out += encode_field(getattr(profile, source), name=source)
        elif kind == "u16":
            out += struct.pack("<H", getattr(profile, source))
        elif kind == "title":
            title = profile.title
            check_ascii_field("title", title)
            out += title.encode("ascii")
        else:
            raise ValueError(f"unknown layout segment {kind!r}")
    return bytes(out)


def compress_payload(data: bytes) -> bytes:
    try:
        return zlib.compress(data, COMPRESSION_LEVEL)
    except (zlib.error, TypeError) as e:
        raise CompressionFailure(f"zlib rejected payload: {e}") from e


def decompress_payload(data: bytes) -> bytes:
    try:
        return zlib.decompress(data)
    except zlib.error as e:
        raise CompressionFailure(f"payload is not a zlib stream: {e}") from e


def encode_text(data: bytes) -> str:
    text = base64.urlsafe_b64encode(data).decode("ascii")
    if not BASE64_PADDING:
        text = text.rstrip("=")
    return text


def decode_text(text: str) -> bytes:
    padded = text + "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def build_link(encoded_text: str) -> str:
    if not encoded_text:
        raise InvalidField("encoded payload is empty", field="payload")
    return LINK_SCHEME + encoded_text


def profile_to_link(profile: ConnectionProfile) -> str:
    """Serialize, compress and wrap a profile into an ``sn://ssh?`` link."""
    raw = serialize_profile(profile)
    return build_link(encode_text(compress_payload(raw)))


def link_to_payload(uri: str) -> bytes:
    """Recover the serialized profile bytes from a link (inverse of profile_to_link)."""
    if not uri.startswith(LINK_SCHEME):
        raise InvalidField(f"link must start with {LINK_SCHEME!r}", field="uri")
    return decompress_payload(decode_text(uri[len(LINK_SCHEME):]))


@dataclass(frozen=True)
class ConnectionLink:
    uri: str
    qr: QrImage


def build_connection_link(profile: ConnectionProfile) -> ConnectionLink:
    uri = profile_to_link(profile)
    return ConnectionLink(uri=uri, qr=render_qr(uri))


__all__ = [
    "LINK_SCHEME",
    "PROFILE_LAYOUT",
    "ConnectionLink",
    "encode_field",
    "serialize_profile",
    "compress_payload",
    "decompress_payload",
    "encode_text",
    "decode_text",
    "build_link",
    "profile_to_link",
    "link_to_payload",
    "build_connection_link",
]
