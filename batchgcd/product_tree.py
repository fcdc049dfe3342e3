import logging
from typing import List, Optional, Sequence, Union

from gmpy2 import mpz

from batchgcd.config import BatchGCDConfig, PRODUCT_FORK_THRESHOLD
from batchgcd.errors import TooFewNumbersError, TreeInvariantError
from batchgcd.forkjoin import ForkJoinPool

logger = logging.getLogger(__name__)

# =============================================================================
# Baumknoten


class Leaf:
    """Blatt des Produktbaums, value ist die ursprüngliche Zahl."""
    __slots__ = ('value',)

    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return f"Leaf({int(self.value)})"


class Internal:
    """Innerer Knoten, value ist das Produkt der Werte beider Kinder."""
    __slots__ = ('value', 'left', 'right')

    def __init__(self, value, left: 'ProductTreeNode', right: 'ProductTreeNode'):
        self.value = value
        self.left = left
        self.right = right

    def __repr__(self):
        return f"Internal({int(self.value)}, {self.left!r}, {self.right!r})"


ProductTreeNode = Union[Leaf, Internal]

# int und gmpy2.mpz, keine floats
INTEGER_TYPES = (int, type(mpz(0)))

# =============================================================================
# Aufbau


def check_numbers(numbers: Sequence) -> List[mpz]:
    """
    Prüft die Vorbedingung (mindestens zwei positive Zahlen) und konvertiert nach mpz.
    """
    if len(numbers) < 2:
        raise TooFewNumbersError(f"Can't compute GCDs with less than 2 numbers, got {len(numbers)}")
    for idx, x in enumerate(numbers):
        if isinstance(x, bool) or not isinstance(x, INTEGER_TYPES):
            raise TooFewNumbersError(f"All numbers must be integers, got {x!r} at index {idx}")
    converted = [mpz(x) for x in numbers]
    for idx, x in enumerate(converted):
        if x <= 0:
            raise TooFewNumbersError(f"All numbers must be positive, got {int(x)} at index {idx}")
    return converted


def build_product_tree(numbers: Sequence[mpz], pool: ForkJoinPool,
                       fork_threshold: int = PRODUCT_FORK_THRESHOLD) -> ProductTreeNode:
    """
    Baut den Produktbaum über numbers auf und gibt die Wurzel zurück.
    Bereiche mit mindestens fork_threshold Elementen werden halbiert parallel berechnet.
    """

    def build(i: int, j: int) -> ProductTreeNode:
        if i >= j:
            raise TreeInvariantError(f"Invalid product tree range [{i}, {j})")

        # Basisfall: ein Element
        if j - i == 1:
            return Leaf(numbers[i])

        # Basisfall: zwei Elemente
        if j - i == 2:
            a = numbers[i]
            b = numbers[i + 1]
            return Internal(a * b, Leaf(a), Leaf(b))

        # linke Hälfte bekommt bei ungerader Länge das zusätzliche Element
        half = (i + 1 + j) // 2

        if j - i < fork_threshold:
            left = build(i, half)
            right = build(half, j)
        else:
            logger.debug(f"Forking product subtree [{i}, {half})")
            left_task = pool.fork(build, i, half)
            right = build(half, j)
            left = left_task.join()

        return Internal(left.value * right.value, left, right)

    return build(0, len(numbers))


def product_tree(numbers: Sequence, config: Optional[BatchGCDConfig] = None) -> ProductTreeNode:
    """Baut den Produktbaum mit eigenem Pool, vor allem für Tests und Einzelaufrufe."""
    config = config or BatchGCDConfig()
    checked = check_numbers(numbers)
    with ForkJoinPool(config.worker_count()) as pool:
        return build_product_tree(checked, pool, config.product_tree.fork_threshold)


def leaves(root: ProductTreeNode) -> List:
    """Gibt die Blattwerte von links nach rechts zurück."""
    if isinstance(root, Leaf):
        return [root.value]
    return leaves(root.left) + leaves(root.right)
