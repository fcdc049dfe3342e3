from typing import Dict, List


def to_32bit_or_hex(x: int):
    """
    Gibt x zurück, wenn es in 32 Bit passt, sonst die Hex-Darstellung.
    """
    if x in range(-(2 ** 31), 2 ** 31):
        return x
    return hex(x)


def factored_entries(factor_map: Dict[int, List[int]]) -> List[dict]:
    """
    Wandelt die Faktor-Abbildung in eine nach Modulus sortierte, JSON-taugliche Liste um.
    """
    entries = []
    for number in sorted(factor_map):
        entries.append({
            "modulus": to_32bit_or_hex(number),
            "factors": [to_32bit_or_hex(f) for f in factor_map[number]],
        })
    return entries


def format_factorization(factor_map: Dict[int, List[int]]) -> str:
    """Eine Zeile pro Zahl: n = p × q, Faktoren aufsteigend sortiert."""
    lines = []
    for number in sorted(factor_map):
        joined = " × ".join(str(f) for f in sorted(factor_map[number]))
        lines.append(f"{number} = {joined}")
    return "\n".join(lines)
