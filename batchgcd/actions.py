import logging
from typing import Dict, List, Optional

from batchgcd import moduli_source
from batchgcd.config import BatchGCDConfig
from batchgcd.factor_refiner import factor
from batchgcd.gcd_extractor import batch_gcd
from batchgcd.report import factored_entries, format_factorization, to_32bit_or_hex

logger = logging.getLogger(__name__)


def _require_list(arguments, name) -> List:
    values = arguments.get(name)
    if not isinstance(values, list):
        raise ValueError(f"Missing argument {name}")
    return values


def _factor_reply(moduli: List[int], config: Optional[BatchGCDConfig]) -> Dict:
    factored = factor(moduli, config)
    if factored:
        logger.info("Factored moduli:\n" + format_factorization(factored))
    return {"factored": factored_entries(factored)}


def batch_gcd_action(arguments, config: Optional[BatchGCDConfig] = None):
    """
    {"moduli": [...]} -> {"gcds": [...]}, ein GCD pro Modulus in Eingabereihenfolge.
    """
    moduli = [moduli_source.parse_to_int(m) for m in _require_list(arguments, "moduli")]
    gcds = batch_gcd(moduli, config)
    return {"gcds": [to_32bit_or_hex(g) for g in gcds]}


def factor_action(arguments, config: Optional[BatchGCDConfig] = None):
    """
    {"moduli": [...]} -> {"factored": [{"modulus": n, "factors": [...]}, ...]}
    """
    moduli = [moduli_source.parse_to_int(m) for m in _require_list(arguments, "moduli")]
    return _factor_reply(moduli, config)


def factor_ssh_keys_action(arguments, config: Optional[BatchGCDConfig] = None):
    """
    {"keys": ["AAAAB3NzaC1yc2E...", ...]} -> wie factor
    """
    moduli = [moduli_source.parse_ssh_public_key(k) for k in _require_list(arguments, "keys")]
    return _factor_reply(moduli, config)


def factor_file_action(arguments, config: Optional[BatchGCDConfig] = None):
    """
    {"path": "moduli.gz", "format": "hex" | "ssh"} -> wie factor
    """
    path = arguments.get("path")
    if not isinstance(path, str):
        raise ValueError("Missing argument path")
    moduli = moduli_source.load_moduli(path, arguments.get("format", "hex"))
    return _factor_reply(moduli, config)


ACTION_LUT = {
    "batch_gcd": batch_gcd_action,
    "factor": factor_action,
    "factor_ssh_keys": factor_ssh_keys_action,
    "factor_file": factor_file_action,
}
