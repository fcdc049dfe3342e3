import logging
from typing import List, Optional

from gmpy2 import f_mod, mpz

from batchgcd.config import BatchGCDConfig, REMAINDER_FORK_BITS
from batchgcd.errors import TreeInvariantError
from batchgcd.forkjoin import ForkJoinPool
from batchgcd.product_tree import Internal, Leaf, ProductTreeNode

logger = logging.getLogger(__name__)


def compute_remainders(root: ProductTreeNode, pool: ForkJoinPool,
                       fork_bits: int = REMAINDER_FORK_BITS) -> List[mpz]:
    """
    Top-down Reduktion: liefert N mod n_i^2 für jedes Blatt i in Blattreihenfolge,
    wobei N der Wert der Wurzel ist.
    """

    def descend(n: mpz, node: ProductTreeNode) -> List[mpz]:
        if isinstance(node, Leaf):
            return [f_mod(n, node.value * node.value)]

        if not isinstance(node, Internal) or node.left is None or node.right is None:
            raise TreeInvariantError(f"Malformed remainder tree node: {node!r}")

        # n <= Knotenwert: Reduktion modulo Quadrat ändert nichts
        if n > node.value:
            n = f_mod(n, node.value * node.value)

        if n.bit_length() < fork_bits:
            left = descend(n, node.left)
            right = descend(n, node.right)
        else:
            logger.debug(f"Forking remainder subtree, modulus has {n.bit_length()} bits")
            left_task = pool.fork(descend, n, node.left)
            right = descend(n, node.right)
            left = left_task.join()

        # Reihenfolge immer links vor rechts, egal wer zuerst fertig ist
        return left + right

    return descend(mpz(root.value), root)


def remainder_tree(root: ProductTreeNode, config: Optional[BatchGCDConfig] = None) -> List[mpz]:
    """Berechnet den Restbaum mit eigenem Pool."""
    config = config or BatchGCDConfig()
    with ForkJoinPool(config.worker_count()) as pool:
        return compute_remainders(root, pool, config.remainder_tree.fork_bits)
