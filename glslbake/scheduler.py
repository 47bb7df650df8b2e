"""
Run build tasks in parallel, and collect their outcomes.
"""

import os
import concurrent.futures

from .task import BuildFailure
from .utils import logger


def get_worker_count(max_workers=None, n_tasks=None):
    """Get the number of worker threads to use.

    Defaults to the hardware concurrency, never more than the number of
    tasks, and at least one.
    """
    if max_workers is None:
        max_workers = os.cpu_count() or 1
    max_workers = int(max_workers)
    if max_workers < 1:
        raise ValueError(f"max_workers must be at least 1, not {max_workers}")
    if n_tasks is not None:
        max_workers = min(max_workers, max(1, n_tasks))
    return max_workers


def _run_one(task, request):
    try:
        return task(request)
    except Exception as err:
        logger.debug(f"Task for {request!r} raised", exc_info=True)
        return BuildFailure.from_exception(request, err)


def run_all(requests, task, max_workers=None, progress=None):
    """Run ``task(request)`` for each request on a pool of worker threads.

    Parameters
    ----------
    requests : list
        The ``BuildRequest`` objects. They must be unique.
    task : callable
        Called with one request, returns its outcome. An exception raised by
        the task becomes a ``BuildFailure`` for that request.
    max_workers : int | None
        The size of the pool. Default the hardware concurrency.
    progress : callable | None
        Called as ``progress(request, outcome)`` in the calling thread as
        outcomes come in. Errors raised by it are logged and ignored.

    Blocks until every task has finished; a failing task does not stop the
    others. Returns a list of ``(request, outcome)`` tuples, in order of
    completion.
    """
    requests = list(requests)
    if len(set(requests)) != len(requests):
        raise ValueError("Cannot run duplicate build requests.")
    if not requests:
        return []

    n_workers = get_worker_count(max_workers, len(requests))
    logger.info(f"Running {len(requests)} tasks on {n_workers} threads.")

    results = []
    with concurrent.futures.ThreadPoolExecutor(
        max_workers=n_workers, thread_name_prefix="glslbake"
    ) as executor:
        futures = {
            executor.submit(_run_one, task, request): request for request in requests
        }
        for future in concurrent.futures.as_completed(futures):
            request = futures[future]
            outcome = future.result()
            if isinstance(outcome, BuildFailure):
                logger.error(f"Failed to build {request!r}:\n{outcome.message}")
            results.append((request, outcome))
            if progress is not None:
                try:
                    progress(request, outcome)
                except Exception:
                    logger.exception(f"Progress callback failed for {request!r}")

    return results
