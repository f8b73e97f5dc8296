"""Concurrent task scheduling with fail-fast, full fan-in semantics.

Top-level tasks and the per-file fan-out inside a task each get their own
thread pool, so a task waiting on its fan-out never starves the outer pool.
"""

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Hashable, Iterable, List, Mapping, Optional, TypeVar

from loguru import logger

from themepack_engine.errors import TaskFailedError
from themepack_engine.models import TaskDescriptor, TaskKind, TaskResult

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


def run_concurrently(tasks: Mapping[K, Callable[[], T]], max_workers: Optional[int] = None) -> Dict[K, T]:
    """Run independent zero-argument tasks in parallel.

    Every started task is allowed to finish. If any task fails, the first
    failure to complete is raised as TaskFailedError and all results are
    discarded.

    Args:
        tasks: Mapping of task key to callable
        max_workers: Pool size, defaults to one thread per task

    Returns:
        Mapping with exactly the keys of tasks, each mapped to its own result

    Raises:
        TaskFailedError: Wrapping the first error observed
    """
    if not tasks:
        return {}

    results: Dict[K, T] = {}
    first_error: Optional[TaskFailedError] = None

    with ThreadPoolExecutor(max_workers=max_workers or len(tasks)) as executor:
        future_to_key: Dict[Future, K] = {executor.submit(task): key for key, task in tasks.items()}

        for future in as_completed(future_to_key):
            key = future_to_key[future]
            error = future.exception()
            if error is not None:
                if first_error is None:
                    logger.debug(f"Task {_label(key)} failed first: {error}")
                    first_error = TaskFailedError(key, error)
                    first_error.__cause__ = error
                else:
                    logger.debug(f"Discarding later failure of task {_label(key)}: {error}")
                continue
            results[key] = future.result()

    if first_error is not None:
        raise first_error
    return results


def run_descriptors(descriptors: List[TaskDescriptor], max_workers: Optional[int] = None) -> Dict[TaskKind, TaskResult]:
    """Schedule typed task descriptors, keyed by their kind."""
    tasks = {descriptor.kind: descriptor.run for descriptor in descriptors}
    if len(tasks) != len(descriptors):
        raise ValueError("Task kinds must be unique within a run")
    return run_concurrently(tasks, max_workers=max_workers)


def map_concurrently(func: Callable[[K], T], keys: Iterable[K], max_workers: Optional[int] = None) -> Dict[K, T]:
    """Apply func to every key in parallel and join results by key.

    The first failure cancels work that has not started yet and is re-raised
    unchanged, so it becomes the owning task's error.
    """
    keys = list(keys)
    if not keys:
        return {}

    results: Dict[K, T] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_key = {executor.submit(func, key): key for key in keys}
        try:
            for future in as_completed(future_to_key):
                results[future_to_key[future]] = future.result()
        except BaseException:
            for future in future_to_key:
                future.cancel()
            raise

    return results


def _label(key: Hashable) -> str:
    return str(getattr(key, "value", key))
