import threading

import pytest

from batchgcd.forkjoin import ForkJoinPool


def fork_sum(pool, values):
    """Recursive fork/join sum over a list."""
    if len(values) <= 2:
        return sum(values)
    half = len(values) // 2
    left = pool.fork(fork_sum, pool, values[:half])
    right = fork_sum(pool, values[half:])
    return left.join() + right


class TestForkJoinPool:

    def test_fork_join_result(self):
        with ForkJoinPool(2) as pool:
            task = pool.fork(pow, 3, 4)
            assert task.join() == 81

    def test_recursive_fork_with_single_worker_does_not_deadlock(self):
        values = list(range(1000))
        with ForkJoinPool(1) as pool:
            assert fork_sum(pool, values) == sum(values)

    def test_recursive_fork_with_many_workers(self):
        values = list(range(5000))
        with ForkJoinPool(8) as pool:
            assert fork_sum(pool, values) == sum(values)

    def test_map_preserves_order(self):
        def slow_square(x):
            # later inputs finish first
            threading.Event().wait(0.001 * (10 - x))
            return x * x

        with ForkJoinPool(4) as pool:
            assert pool.map(slow_square, range(10)) == [x * x for x in range(10)]

    def test_exception_propagates_from_join(self):
        def boom():
            raise RuntimeError("boom")

        with ForkJoinPool(2) as pool:
            task = pool.fork(boom)
            with pytest.raises(RuntimeError, match="boom"):
                task.join()

    def test_exception_propagates_from_map(self):
        def fail_on_three(x):
            if x == 3:
                raise ValueError("three")
            return x

        with ForkJoinPool(2) as pool:
            with pytest.raises(ValueError, match="three"):
                pool.map(fail_on_three, range(5))
