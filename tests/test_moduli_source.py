import base64
import gzip

import pytest

from batchgcd.errors import MalformedKeyError
from batchgcd.moduli_source import (
    load_moduli,
    parse_hex_moduli,
    parse_ssh_public_key,
    parse_to_int,
    read_lines,
)
from conftest import M61, M89, make_ssh_key, ssh_field, ssh_mpint


class TestParseToInt:

    def test_int_passthrough(self):
        assert parse_to_int(77) == 77

    def test_strings_with_prefix(self):
        assert parse_to_int("0xff") == 255
        assert parse_to_int(" 35 ") == 35
        assert parse_to_int("0b101") == 5

    def test_invalid(self):
        with pytest.raises(MalformedKeyError):
            parse_to_int("zz")
        with pytest.raises(MalformedKeyError):
            parse_to_int(None)
        with pytest.raises(MalformedKeyError):
            parse_to_int(True)


class TestHexModuli:

    def test_skips_blank_and_comments(self):
        lines = ["# moduli", "f", "", "  23  ", "4D"]
        assert parse_hex_moduli(lines) == [15, 35, 77]

    def test_invalid_line(self):
        with pytest.raises(MalformedKeyError, match="Line 2"):
            parse_hex_moduli(["ff", "xyz"])


class TestSSHKeys:

    def test_parse_modulus(self):
        n = M61 * M89
        assert parse_ssh_public_key(make_ssh_key(n)) == n

    def test_parse_authorized_keys_line(self):
        n = M61 * 1000003
        line = f"ssh-rsa {make_ssh_key(n)} user@host"
        assert parse_ssh_public_key(line) == n

    def test_modulus_with_high_bit_set(self):
        # 2**64 - 59 needs the leading zero byte in mpint form
        n = 2 ** 64 - 59
        assert parse_ssh_public_key(make_ssh_key(n)) == n

    def test_rejects_other_key_types(self):
        key = make_ssh_key(35, key_type=b"ssh-dss")
        with pytest.raises(MalformedKeyError, match="ssh-rsa"):
            parse_ssh_public_key(key)

    def test_rejects_truncated_key(self):
        blob = ssh_field(b"ssh-rsa") + ssh_mpint(65537) + (100).to_bytes(4, "big") + b"\x01\x02"
        with pytest.raises(MalformedKeyError, match="Truncated"):
            parse_ssh_public_key(base64.b64encode(blob).decode())

    def test_rejects_invalid_base64(self):
        with pytest.raises(MalformedKeyError):
            parse_ssh_public_key("not*base64")


class TestFiles:

    def test_read_plain_file(self, tmp_path):
        path = tmp_path / "moduli"
        path.write_text("f\n23\n")
        assert read_lines(path) == ["f", "23"]

    def test_read_gzip_file(self, tmp_path):
        path = tmp_path / "moduli.gz"
        with gzip.open(path, "wt", encoding="utf-8") as f:
            f.write("f\n23\n4d\n")
        assert read_lines(path) == ["f", "23", "4d"]

    def test_load_hex_moduli(self, tmp_path):
        path = tmp_path / "moduli.gz"
        with gzip.open(path, "wt", encoding="utf-8") as f:
            f.write("f\n23\n4d\n")
        assert load_moduli(path, "hex") == [15, 35, 77]

    def test_load_ssh_keys(self, tmp_path):
        path = tmp_path / "keys"
        path.write_text(make_ssh_key(15) + "\n\n" + make_ssh_key(35) + "\n")
        assert load_moduli(path, "ssh") == [15, 35]

    def test_unknown_format(self, tmp_path):
        with pytest.raises(ValueError, match="Unknown format"):
            load_moduli(tmp_path / "keys", "pem")
