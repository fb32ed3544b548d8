"""
Shared nodes used from several threads: per-node locks, no lost records, no deadlock.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from scalargrad import Scalar, Tape, backward


N_WORKERS = 8
N_ITER = 200


def test_concurrent_construction_from_shared_leaf():
    t = Tape()
    a = Scalar(3.0, "a", tape=t)

    def work(_):
        out = []
        for _ in range(N_ITER):
            out.append((a + a, a * a, a - a))
        return out

    with ThreadPoolExecutor(N_WORKERS) as pool:
        results = [r for chunk in pool.map(work, range(N_WORKERS)) for r in chunk]

    assert len(t) == 1 + 3 * N_WORKERS * N_ITER
    assert len({s.index for triple in results for s in triple}) == 3 * N_WORKERS * N_ITER
    for s, p, d in results:
        assert (s.data, p.data, d.data) == (6.0, 9.0, 0.0)
        assert s.children == (a, a)


def test_concurrent_backward_on_disjoint_graphs_sharing_a_tape():
    t = Tape()
    leaves = [Scalar(float(i + 1), f"x{i}", tape=t) for i in range(N_WORKERS)]
    barrier = threading.Barrier(N_WORKERS)

    def work(i):
        x = leaves[i]
        y = (x * x + x).tanh() * x
        barrier.wait()
        for _ in range(20):
            backward(y)
        return x.grad

    with ThreadPoolExecutor(N_WORKERS) as pool:
        got = list(pool.map(work, range(N_WORKERS)))

    ref = Tape()
    for i, g in enumerate(got):
        xr = Scalar(float(i + 1), tape=ref)
        yr = (xr * xr + xr).tanh() * xr
        backward(yr)
        assert g == pytest.approx(xr.grad)


def test_data_writes_and_reads_interleave_safely():
    t = Tape()
    a = Scalar(0.0, "a", tape=t)
    written = {float(i) for i in range(N_WORKERS)}
    stop = threading.Event()

    def writer(i):
        while not stop.is_set():
            a.set_data(float(i))

    def reader():
        seen = []
        for _ in range(N_ITER):
            seen.append((a * 2.0).data / 2.0)
        return seen

    threads = [threading.Thread(target=writer, args=(i,)) for i in range(N_WORKERS)]
    for th in threads:
        th.start()
    try:
        seen = reader()
    finally:
        stop.set()
        for th in threads:
            th.join()

    assert set(seen) <= written | {0.0}
