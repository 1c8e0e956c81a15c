"""Run many jobs with a cap on how many are outstanding at once.

Jobs are split into consecutive batches of at most ``limit``. A batch runs
fully concurrently and must finish before the next one starts. The first
failure in a batch aborts the run and later batches never start. Siblings
already running are left to finish; their results are discarded.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import TypeVar, cast

LOGGER = logging.getLogger(__name__)

DEFAULT_LIMIT = 1000

T = TypeVar("T")


class BatchFailed(RuntimeError):
    """Raised when a job fails; the job's exception is chained as ``__cause__``."""

    def __init__(self, batch_index: int, job_index: int, error: BaseException) -> None:
        super().__init__(f"job {job_index} in batch {batch_index} failed: {error!r}")
        self.batch_index = batch_index
        self.job_index = job_index
        self.error = error


def _batches(count: int, limit: int) -> range:
    if limit < 1:
        raise ValueError("limit must be >= 1")
    return range(0, count, limit)


def run_limited(jobs: Sequence[Callable[[], T]], limit: int = DEFAULT_LIMIT) -> list[T]:
    """Run `jobs` on threads, `limit` at a time, returning results in submission order."""

    results: list[T] = []
    for batch_index, start in enumerate(_batches(len(jobs), limit)):
        batch = jobs[start : start + limit]
        executor = ThreadPoolExecutor(max_workers=len(batch), thread_name_prefix="run-limited")
        futures: list[Future[T]] = [executor.submit(job) for job in batch]
        done, _ = wait(futures, return_when=FIRST_EXCEPTION)

        failed = [index for index, future in enumerate(futures) if future in done and future.exception()]
        if failed:
            executor.shutdown(wait=False)
            index = failed[0]
            error = cast(BaseException, futures[index].exception())
            raise BatchFailed(batch_index, start + index, error) from error

        executor.shutdown(wait=True)
        results.extend(future.result() for future in futures)
        LOGGER.debug("run limited: %s jobs left", max(len(jobs) - start - len(batch), 0))
    return results


async def run_limited_async(
    jobs: Sequence[Callable[[], Awaitable[T]]], limit: int = DEFAULT_LIMIT
) -> list[T]:
    """Asyncio flavour of `run_limited` for coroutine factories."""

    results: list[T] = []
    for batch_index, start in enumerate(_batches(len(jobs), limit)):
        batch = jobs[start : start + limit]
        tasks = [asyncio.ensure_future(job()) for job in batch]
        try:
            batch_results = await asyncio.gather(*tasks)
        except Exception as exc:
            for task in tasks:
                task.add_done_callback(_retrieve_exception)
            index = next((i for i, task in enumerate(tasks) if _raised(task, exc)), 0)
            raise BatchFailed(batch_index, start + index, exc) from exc
        results.extend(batch_results)
        LOGGER.debug("run limited: %s jobs left", max(len(jobs) - start - len(batch), 0))
    return results


def _raised(task: asyncio.Future[object], error: BaseException) -> bool:
    return task.done() and not task.cancelled() and task.exception() is error


def _retrieve_exception(task: asyncio.Future[object]) -> None:
    # Siblings keep running after a failure; their errors are consumed here.
    if not task.cancelled():
        task.exception()


__all__ = ["BatchFailed", "DEFAULT_LIMIT", "run_limited", "run_limited_async"]
