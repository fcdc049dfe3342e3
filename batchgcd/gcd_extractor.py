"""
Batch-GCD nach Bernstein (http://facthacks.cr.yp.to/batchgcd.html).

Für jede Zahl x_i wird gcd(x_i, Produkt aller anderen) berechnet, ohne dieses
Produkt je einzeln zu bilden: r_i = N mod x_i^2 und damit
r_i / x_i = (N / x_i) mod x_i, also gcd(x_i, r_i / x_i) = gcd(x_i, N / x_i).
"""
import logging
from typing import List, Optional, Sequence

from gmpy2 import gcd, mpz

from batchgcd.config import BatchGCDConfig
from batchgcd.errors import TreeInvariantError
from batchgcd.forkjoin import ForkJoinPool
from batchgcd.product_tree import build_product_tree, check_numbers
from batchgcd.remainder_tree import compute_remainders

logger = logging.getLogger(__name__)


def extract_gcds(numbers: Sequence[mpz], remainders: Sequence[mpz], pool: ForkJoinPool) -> List[mpz]:
    """
    gcd(n_i, r_i // n_i) für jeden Index, parallel und in Eingabereihenfolge.
    """
    if len(numbers) != len(remainders):
        raise TreeInvariantError(
            f"Remainder tree returned {len(remainders)} values for {len(numbers)} numbers")

    def one(idx: int) -> mpz:
        n_i = numbers[idx]
        return gcd(n_i, remainders[idx] // n_i)

    return pool.map(one, range(len(numbers)))


def compute_batch_gcd(numbers: Sequence[mpz], pool: ForkJoinPool, config: BatchGCDConfig) -> List[mpz]:
    """Produktbaum -> Restbaum -> GCDs auf einem bestehenden Pool."""
    logger.info(f"Building product tree for {len(numbers)} numbers...")
    tree = build_product_tree(numbers, pool, config.product_tree.fork_threshold)
    logger.info(f"Built product tree ({tree.value.bit_length()} bits)")

    logger.info("Building remainder tree...")
    remainders = compute_remainders(tree, pool, config.remainder_tree.fork_bits)
    logger.info("Built remainder tree")

    logger.info("Computing GCDs...")
    gcds = extract_gcds(numbers, remainders, pool)
    logger.info("Computed GCDs")
    return gcds


def batch_gcd(numbers: Sequence, config: Optional[BatchGCDConfig] = None) -> List[int]:
    """
    Berechnet für jede Zahl den GCD mit allen anderen. Das Ergebnis kann die Zahl
    selbst sein, wenn
      1. die Zahl mehrfach vorkommt,
      2. die Zahl ein Faktor einer anderen Zahl ist,
      3. alle Faktoren der Zahl in anderen Zahlen vorkommen.
    """
    config = config or BatchGCDConfig()
    checked = check_numbers(numbers)
    with ForkJoinPool(config.worker_count()) as pool:
        gcds = compute_batch_gcd(checked, pool, config)
    return [int(g) for g in gcds]
