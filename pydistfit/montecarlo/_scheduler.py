"""
Execution scheduler for independent iterations.

Runs a task over iteration indices 0..n-1, either sequentially or split
across a pool of workers, and returns an (n, k) matrix whose row i is
always the result of iteration i regardless of completion order.

Executor strategies:
    thread:  ThreadPoolExecutor, shared memory.
    process: ProcessPoolExecutor with the platform's default start method.
    auto:    ProcessPoolExecutor using "fork" where the host offers it
             (copy-on-write sharing of the model), otherwise as "process".
"""

from __future__ import annotations

import logging
import multiprocessing
from concurrent.futures import (
    Executor, ProcessPoolExecutor, ThreadPoolExecutor, as_completed,
)
from typing import Callable, Protocol

import numpy as np
from numpy.typing import NDArray

from pydistfit.core.exceptions import BootstrapCancelledError

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 100
CHUNKS_PER_WORKER = 4


class IterationTask(Protocol):
    """Work unit accepted by run_iterations."""

    @property
    def n_columns(self) -> int:
        ...

    def run_one(self, index: int) -> NDArray:
        ...

    def __call__(self, indices: NDArray) -> NDArray:
        ...


def _make_executor(executor: str, workers: int) -> Executor:
    if executor == "thread":
        return ThreadPoolExecutor(max_workers=workers)
    if executor == "auto" and "fork" in multiprocessing.get_all_start_methods():
        return ProcessPoolExecutor(
            max_workers=workers,
            mp_context=multiprocessing.get_context("fork"),
        )
    return ProcessPoolExecutor(max_workers=workers)


def run_sequential(
    task: IterationTask,
    n: int,
    *,
    label: str = "Bootstrap",
    progress: Callable[[int, int], None] | None = None,
) -> NDArray:
    """Run iterations 0..n-1 in order, logging every PROGRESS_EVERY-th."""
    out = np.empty((n, task.n_columns), dtype=np.float64)
    i = 0
    try:
        for i in range(n):
            out[i] = task.run_one(i)
            done = i + 1
            if done % PROGRESS_EVERY == 0:
                logger.info("%s iteration %d/%d", label, done, n)
                if progress is not None:
                    progress(done, n)
    except KeyboardInterrupt as e:
        raise BootstrapCancelledError(
            f"{label} interrupted after {i} of {n} iterations",
            replicate_count=n,
        ) from e
    return out


def _cancel(pool: Executor) -> None:
    """Drop queued chunks and stop running ones before returning."""
    terminate = getattr(pool, "terminate_workers", None)
    if terminate is not None:
        terminate()
    else:
        pool.shutdown(wait=True, cancel_futures=True)


def run_parallel(
    task: IterationTask,
    n: int,
    workers: int,
    *,
    executor: str = "auto",
    label: str = "Bootstrap",
    progress: Callable[[int, int], None] | None = None,
) -> NDArray:
    """
    Split 0..n-1 into CHUNKS_PER_WORKER contiguous chunks per worker and
    run them concurrently. Rows are written back by iteration index.

    Raises:
        BootstrapCancelledError: If interrupted. Queued chunks are
            cancelled and running ones finished or terminated first, so
            no iteration completes after the raise.
    """
    n_chunks = min(n, workers * CHUNKS_PER_WORKER)
    chunks = [c for c in np.array_split(np.arange(n), n_chunks) if len(c)]
    out = np.full((n, task.n_columns), np.nan, dtype=np.float64)
    n_workers = min(workers, len(chunks))
    logger.debug(
        "%s: %d iterations in %d chunks on %d workers (executor=%s)",
        label, n, len(chunks), n_workers, executor,
    )

    pool = _make_executor(executor, n_workers)
    completed = 0
    try:
        futures = {pool.submit(task, chunk): chunk for chunk in chunks}
        for future in as_completed(futures):
            chunk = futures[future]
            out[chunk] = future.result()
            completed += len(chunk)
            logger.debug("%s: %d/%d iterations complete", label, completed, n)
            if progress is not None:
                progress(completed, n)
    except KeyboardInterrupt as e:
        _cancel(pool)
        raise BootstrapCancelledError(
            f"{label} interrupted with {n - completed} of {n} iterations "
            f"outstanding",
            replicate_count=n,
        ) from e
    except BaseException:
        _cancel(pool)
        raise
    pool.shutdown(wait=True)
    return out


def run_iterations(
    task: IterationTask,
    n: int,
    *,
    parallel: bool = False,
    workers: int = 1,
    executor: str = "auto",
    label: str = "Bootstrap",
    progress: Callable[[int, int], None] | None = None,
) -> NDArray:
    """
    Run n independent iterations and collect an (n, k) matrix.

    Parallel and sequential runs of the same task return identical
    matrices: each iteration depends only on its index.
    """
    if parallel and workers > 1 and n > 1:
        return run_parallel(
            task, n, workers, executor=executor, label=label, progress=progress,
        )
    return run_sequential(task, n, label=label, progress=progress)
