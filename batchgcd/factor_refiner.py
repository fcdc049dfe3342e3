import logging
from typing import Dict, List, Optional, Sequence, Tuple

from gmpy2 import gcd, mpz
from sympy import factorint

from batchgcd.config import BatchGCDConfig, SMALL_FACTOR_LIMIT
from batchgcd.forkjoin import ForkJoinPool
from batchgcd.gcd_extractor import compute_batch_gcd
from batchgcd.product_tree import check_numbers

logger = logging.getLogger(__name__)

Entry = Tuple[int, List[int]]


def fallback_split(number: mpz, numbers: Sequence[mpz]) -> Optional[List[int]]:
    """
    Naiver Fallback, wenn der Batch-GCD die Zahl selbst liefert: erster echter
    Teiler gcd(k, number) über alle Eingaben in Eingabereihenfolge.
    """
    for k in numbers:
        slow = gcd(k, number)
        if 1 < slow < number:
            return [int(slow), int(number // slow)]
    return None


def classify(idx: int, numbers: Sequence[mpz], gcds: Sequence[mpz]) -> Optional[Entry]:
    """
    Ordnet einen Index ein: kein gemeinsamer Faktor (None), zwei echte Faktoren
    oder mehrdeutig (Fallback über alle anderen Zahlen).
    """
    g = gcds[idx]
    number = numbers[idx]

    if g == 1:
        return None

    if g == number:
        logger.warning(f"GCD of number at index {idx} equals the number itself, falling back to pairwise GCDs")
        factors = fallback_split(number, numbers)
        if factors is None:
            logger.info(f"No proper divisor found for number at index {idx}")
            return None
        return int(number), factors

    return int(number), [int(g), int(number // g)]


def expand_small_factors(factors: Sequence[int], limit: int = SMALL_FACTOR_LIMIT) -> List[int]:
    """
    Ersetzt jeden Faktor unterhalb von limit durch seine Primfaktorzerlegung
    (aufsteigend). Größere Faktoren bleiben stehen und sind nicht unbedingt prim.
    """
    result = []
    for f in factors:
        if f < limit:
            for p, e in sorted(factorint(f).items()):
                result.extend([int(p)] * e)
        else:
            result.append(f)
    return result


def factor(numbers: Sequence, config: Optional[BatchGCDConfig] = None) -> Dict[int, List[int]]:
    """
    Versucht die Zahlen über gemeinsame Faktoren zu zerlegen. Zurück kommt eine
    Abbildung Zahl -> Faktoren, deren Produkt wieder die Zahl ergibt. Zahlen ohne
    gefundenen Faktor fehlen in der Abbildung.
    """
    config = config or BatchGCDConfig()
    checked = check_numbers(numbers)

    with ForkJoinPool(config.worker_count()) as pool:
        gcds = compute_batch_gcd(checked, pool, config)
        logger.info("Factoring using GCDs...")
        entries = pool.map(lambda idx: classify(idx, checked, gcds), range(len(checked)))

    # erst nach dem parallelen Durchlauf zusammenführen
    result = {}
    for entry in entries:
        if entry is None:
            continue
        number, factors = entry
        result[number] = expand_small_factors(factors, config.refiner.small_factor_limit)

    logger.info(f"Factored {len(result)} of {len(checked)} numbers")
    return result
