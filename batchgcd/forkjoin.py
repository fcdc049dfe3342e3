from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional


class ForkedTask:
    """Handle auf eine abgezweigte Teilaufgabe."""
    __slots__ = ('fn', 'args', 'future')

    def __init__(self, fn: Callable, args: tuple, future: Future):
        self.fn = fn
        self.args = args
        self.future = future

    def join(self):
        """
        Wartet auf das Ergebnis der Teilaufgabe. Hat noch kein Worker sie
        übernommen, wird sie direkt im aufrufenden Thread berechnet, damit
        wartende Worker den Pool nie blockieren. Exceptions werden weitergereicht.
        """
        if self.future.cancel():
            return self.fn(*self.args)
        return self.future.result()


class ForkJoinPool:
    """
    Thread-Pool für rekursive Fork/Join-Zerlegung: eine Hälfte wird mit fork()
    abgezweigt, die andere im aktuellen Thread gerechnet, danach join().
    Solange gmpy2 den GIL hält, laufen Multiplikationen und Reduktionen trotzdem nacheinander.
    """

    def __init__(self, max_workers: Optional[int] = None):
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="batchgcd")

    def fork(self, fn: Callable, *args) -> ForkedTask:
        return ForkedTask(fn, args, self.executor.submit(fn, *args))

    def map(self, fn: Callable, iterable: Iterable) -> List:
        """Wendet fn parallel an, die Ergebnisse kommen in Eingabereihenfolge zurück."""
        return list(self.executor.map(fn, iterable))

    def shutdown(self):
        self.executor.shutdown(wait=True)

    def __enter__(self) -> 'ForkJoinPool':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
