import base64
import binascii
import gzip
import logging
from pathlib import Path
from typing import Iterable, List, Tuple

from batchgcd.errors import MalformedKeyError

logger = logging.getLogger(__name__)

SSH_RSA = b"ssh-rsa"
FORMATS = ("hex", "ssh")

# =============================================================================
# Einzelwerte


def parse_to_int(value) -> int:
    """
    Konvertiert einen Integer oder String (mit Präfix 0x/0o/0b oder dezimal) in einen Integer.
    """
    if isinstance(value, bool):
        raise MalformedKeyError(f"Invalid number: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip(), 0)
        except ValueError:
            raise MalformedKeyError(f"Invalid number format: {value}")
    raise MalformedKeyError(f"Invalid number: {value!r}")


def parse_hex_moduli(lines: Iterable[str]) -> List[int]:
    """
    Eine hexadezimale Zahl pro Zeile (ohne Präfix). Leere Zeilen und #-Kommentare werden übersprungen.
    """
    moduli = []
    for lineno, line in enumerate(lines, 1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            moduli.append(int(line, 16))
        except ValueError:
            raise MalformedKeyError(f"Line {lineno}: not a hex number: {line[:32]}")
    return moduli

# =============================================================================
# SSH Public Keys (RFC 4253, Abschnitt 6.6)


def _read_string(blob: bytes, pos: int) -> Tuple[bytes, int]:
    """Liest ein uint32-längenpräfixiertes Feld ab pos und gibt (Feld, neue Position) zurück."""
    if pos + 4 > len(blob):
        raise MalformedKeyError("Truncated SSH key: missing length field")
    size = int.from_bytes(blob[pos:pos + 4], "big")
    pos += 4
    if pos + size > len(blob):
        raise MalformedKeyError("Truncated SSH key: field exceeds key length")
    return blob[pos:pos + size], pos + size


def parse_ssh_public_key(key: str) -> int:
    """
    Liest den RSA-Modulus n aus einem Base64-kodierten ssh-rsa Public Key,
    e wird verworfen. Akzeptiert auch die Zeilenform "ssh-rsa AAAA... kommentar".
    """
    parts = key.split()
    if len(parts) >= 2 and parts[0].startswith("ssh-"):
        encoded = parts[1]
    elif len(parts) == 1:
        encoded = parts[0]
    else:
        raise MalformedKeyError(f"Unrecognized SSH key line: {key[:32]}")

    try:
        blob = base64.b64decode(encoded, validate=True)
    except binascii.Error as e:
        raise MalformedKeyError(f"Invalid base64 in SSH key: {e}")

    key_type, pos = _read_string(blob, 0)
    if key_type != SSH_RSA:
        raise MalformedKeyError(f"Only ssh-rsa keys are supported, got {key_type!r}")

    # e überspringen
    _, pos = _read_string(blob, pos)
    n_bytes, pos = _read_string(blob, pos)
    # mpint: Zweierkomplement, Big-Endian
    n = int.from_bytes(n_bytes, "big", signed=True)
    if n <= 0:
        raise MalformedKeyError("SSH key modulus must be positive")
    return n

# =============================================================================
# Dateien


def read_lines(path) -> List[str]:
    """Liest alle Zeilen einer Textdatei, *.gz wird transparent entpackt."""
    path = Path(path)
    if path.suffix == ".gz":
        with gzip.open(path, "rt", encoding="utf-8") as f:
            return f.read().splitlines()
    with open(path, "r", encoding="utf-8") as f:
        return f.read().splitlines()


def load_moduli(path, fmt: str = "hex") -> List[int]:
    """
    Lädt Moduli aus einer Datei: fmt "hex" (eine Zahl pro Zeile) oder "ssh" (ein Key pro Zeile).
    """
    if fmt not in FORMATS:
        raise ValueError(f"Unknown format {fmt}, expected one of {', '.join(FORMATS)}")
    lines = read_lines(path)
    if fmt == "hex":
        moduli = parse_hex_moduli(lines)
    else:
        moduli = [parse_ssh_public_key(line) for line in lines if line.strip()]
    logger.info(f"Loaded {len(moduli)} moduli from {path}")
    return moduli
