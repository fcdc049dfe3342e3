"""
Pytest configuration: puts the repository root on sys.path so tests can
import batchgcd and the gcdscan runner without installing.
"""
import base64
import sys
from pathlib import Path

import pytest

root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

from batchgcd.config import BatchGCDConfig, ProductTreeConfig, RemainderTreeConfig  # noqa: E402

M61 = 2 ** 61 - 1
M89 = 2 ** 89 - 1
M107 = 2 ** 107 - 1


@pytest.fixture
def forking_config():
    """Config with thresholds low enough that small inputs take the parallel paths."""
    return BatchGCDConfig(
        workers=4,
        product_tree=ProductTreeConfig(fork_threshold=3),
        remainder_tree=RemainderTreeConfig(fork_bits=1),
    )


def ssh_field(data: bytes) -> bytes:
    return len(data).to_bytes(4, "big") + data


def ssh_mpint(x: int) -> bytes:
    # leading zero byte keeps the two's complement value positive
    return ssh_field(x.to_bytes(x.bit_length() // 8 + 1, "big"))


def make_ssh_key(n: int, e: int = 65537, key_type: bytes = b"ssh-rsa") -> str:
    blob = ssh_field(key_type) + ssh_mpint(e) + ssh_mpint(n)
    return base64.b64encode(blob).decode("ascii")
