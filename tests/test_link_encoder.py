import secrets
import string
import unittest
import zlib
from unittest.mock import patch

from sshlink.models.connection_profile import ConnectionProfile
from sshlink.services.errors import CompressionFailure, InvalidField, PayloadTooLarge
from sshlink.services.link_encoder import (
    LINK_SCHEME,
    build_connection_link,
    build_link,
    compress_payload,
    decode_text,
    decompress_payload,
    encode_field,
    encode_text,
    link_to_payload,
    profile_to_link,
    serialize_profile,
)


GOLDEN_PROFILE = dict(
    server_address="1.2.3.4",
    port=443,
    username="user001",
    password="pass0001",
    location="US",
    expiry_date="2024-01-01",
)

GOLDEN_BYTES = (
    b"\x00\x00\x00\x00"
    b"1.2.3.\xb4"
    b"\xbb\x01"
    b"\x00\x00"
    b"user00\xb1"
    b"\x01\x00\x00\x00"
    b"pass000\xb1"
    b"\x81\x01\x00\x00\x00\xa1"
    b"SpeedPing(user001) US 2024-01-01"
    b"\x00\x00\x00\x00"
)


def _profile(**overrides) -> ConnectionProfile:
    fields = dict(GOLDEN_PROFILE)
    fields.update(overrides)
    return ConnectionProfile(**fields)


class FieldEncoderTests(unittest.TestCase):
    def test_last_byte_gets_high_bit(self):
        samples = ["a", "ab", "1.2.3.4", "user001", string.printable, "\x00", "\x7f" * 3]
        for s in samples:
            with self.subTest(s=s):
                raw = s.encode("ascii")
                encoded = encode_field(s)
                self.assertEqual(len(encoded), len(raw))
                self.assertEqual(encoded[:-1], raw[:-1])
                self.assertEqual(encoded[-1], raw[-1] + 128)

    def test_every_ascii_character_as_last_byte(self):
        for code in range(128):
            with self.subTest(code=code):
                self.assertEqual(encode_field("x" + chr(code)), b"x" + bytes([code + 128]))

    def test_empty_string_is_rejected(self):
        with self.assertRaises(InvalidField):
            encode_field("")

    def test_non_ascii_is_rejected(self):
        for s in ["café", "éabc", "ok☃"]:
            with self.subTest(s=s):
                with self.assertRaises(InvalidField):
                    encode_field(s)

    def test_invalid_field_names_the_field(self):
        with self.assertRaises(InvalidField) as ctx:
            encode_field("", name="password")
        self.assertEqual(ctx.exception.field, "password")
        self.assertEqual(ctx.exception.stage, "serialize")


class ProfileSerializerTests(unittest.TestCase):
    def test_golden_vector(self):
        self.assertEqual(serialize_profile(_profile()), GOLDEN_BYTES)

    def test_golden_vector_segments(self):
        data = serialize_profile(_profile())
        self.assertEqual(data[:4], b"\x00\x00\x00\x00")
        self.assertEqual(data[11:13], b"\xbb\x01")
        self.assertEqual(data[-4:], b"\x00\x00\x00\x00")
        self.assertIn(b"SpeedPing(user001) US 2024-01-01", data)
        self.assertTrue(data[:-4].endswith(b"SpeedPing(user001) US 2024-01-01"))

    def test_port_is_little_endian(self):
        for port, packed in [(0, b"\x00\x00"), (22, b"\x16\x00"), (8080, b"\x90\x1f"), (65535, b"\xff\xff")]:
            with self.subTest(port=port):
                data = serialize_profile(_profile(port=port))
                self.assertEqual(data[11:13], packed)

    def test_markers_follow_username_and_password(self):
        data = serialize_profile(_profile(username="bob", password="pw"))
        self.assertIn(b"bo\xe2\x01\x00\x00\x00p\xf7\x81\x01\x00\x00\x00\xa1SpeedPing(bob)", data)

    def test_deterministic(self):
        self.assertEqual(serialize_profile(_profile()), serialize_profile(_profile()))

    def test_empty_fields_are_rejected(self):
        for name in ["server_address", "username", "password", "location", "expiry_date"]:
            with self.subTest(field=name):
                with self.assertRaises(InvalidField) as ctx:
                    _profile(**{name: ""})
                self.assertEqual(ctx.exception.field, name)

    def test_port_out_of_range_is_rejected(self):
        for port in [-1, 65536, "443", True]:
            with self.subTest(port=port):
                with self.assertRaises(InvalidField):
                    _profile(port=port)


class CompressionAndTextTests(unittest.TestCase):
    SAMPLES = [b"", b"\x00", bytes(range(256)), GOLDEN_BYTES, b"A" * 5000]

    def test_compression_round_trip(self):
        for data in self.SAMPLES:
            with self.subTest(size=len(data)):
                self.assertEqual(decompress_payload(compress_payload(data)), data)

    def test_compressed_payload_is_zlib(self):
        compressed = compress_payload(GOLDEN_BYTES)
        self.assertEqual(zlib.decompress(compressed), GOLDEN_BYTES)
        self.assertEqual(compressed[0], 0x78)

    def test_compression_failure_is_reported(self):
        with patch("sshlink.services.link_encoder.zlib.compress", side_effect=zlib.error("boom")):
            with self.assertRaises(CompressionFailure):
                compress_payload(GOLDEN_BYTES)

    def test_garbage_does_not_decompress(self):
        with self.assertRaises(CompressionFailure):
            decompress_payload(b"not zlib")

    def test_text_round_trip(self):
        for data in self.SAMPLES + [b"\xfb\xff", b"\xfb\xff\xfe"]:
            with self.subTest(size=len(data)):
                self.assertEqual(decode_text(encode_text(data)), data)

    def test_text_is_urlsafe_and_unpadded(self):
        text = encode_text(b"\xfb\xff\xfe\xfb")
        self.assertEqual(text, "-__--w")
        for data in self.SAMPLES:
            encoded = encode_text(data)
            self.assertNotIn("=", encoded)
            self.assertNotIn("+", encoded)
            self.assertNotIn("/", encoded)


class LinkBuilderTests(unittest.TestCase):
    def test_build_link(self):
        self.assertEqual(build_link("abc"), "sn://ssh?abc")

    def test_empty_text_is_rejected(self):
        with self.assertRaises(InvalidField):
            build_link("")

    def test_profile_link_decodes_back_to_golden_bytes(self):
        uri = profile_to_link(_profile())
        self.assertTrue(uri.startswith(LINK_SCHEME))
        self.assertEqual(link_to_payload(uri), GOLDEN_BYTES)

    def test_foreign_scheme_is_rejected(self):
        with self.assertRaises(InvalidField):
            link_to_payload("vmess://abc")


class ConnectionLinkTests(unittest.TestCase):
    def test_link_and_qr_come_together(self):
        link = build_connection_link(_profile())
        self.assertEqual(link_to_payload(link.uri), GOLDEN_BYTES)
        self.assertTrue(link.qr.png.startswith(b"\x89PNG\r\n\x1a\n"))
        self.assertTrue(0 < link.qr.width <= 550)

    def test_incompressible_password_overflows_qr(self):
        # random hex: zlib can only halve it, base64 grows it again
        profile = _profile(password=secrets.token_hex(4000))
        with self.assertRaises(PayloadTooLarge):
            build_connection_link(profile)


if __name__ == "__main__":
    unittest.main()
