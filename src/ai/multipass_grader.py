"""
Multipass grading.

Runs the same single-pass grading several times with bounded
concurrency and reconciles the runs by majority vote. Any failed run
fails the whole batch.
"""

import asyncio
import itertools
from typing import Any, Awaitable, Callable, List, Optional, Union

from ai.backend import BaseBackend
from ai.consensus import reconcile
from ai.single_pass_grader import SinglePassGrader
from config.constants import DEFAULT_WARMUP_DELAY
from config.logging_config import get_logger
from core.models import (
    GradingProgress,
    GradingRequest,
    GradingResponse,
    GradingResult,
    MultipassResult,
    UsageMetadata,
)
from utils.retry import API_RETRY_CONFIG, RetryConfig

logger = get_logger(__name__)

ProgressCallback = Callable[[GradingProgress], Union[None, Awaitable[None]]]


class MultipassGrader:
    """
    Grade an answer sheet once or several times.

    ``grade`` issues a single grading. ``grade_multipass`` spreads
    ``num_runs`` gradings over ``min(concurrency, num_runs)`` worker tasks
    which claim run indices from a shared counter, then reconciles the
    per-question scores (see ``ai.consensus``).

    Usage:
        grader = MultipassGrader(pool, warmup_delay=15.0)
        multipass = await grader.grade_multipass(request, num_runs=5, concurrency=3)
    """

    def __init__(
        self,
        backend: Optional[BaseBackend] = None,
        retry_config: RetryConfig = API_RETRY_CONFIG,
        warmup_delay: float = DEFAULT_WARMUP_DELAY,
        grader: Optional[SinglePassGrader] = None,
        sleep: Callable[[float], Any] = asyncio.sleep
    ):
        """
        Initialize the multipass grader.

        Args:
            backend: Backend handle or pool (ignored when ``grader`` is given)
            retry_config: Retry limits for each backend call
            warmup_delay: Seconds the rest of the first batch waits so the
                backend can reuse cached context from the first call (0 disables)
            grader: Pre-built single-pass grader
            sleep: Awaitable sleep used for warm-up and retries
        """
        if grader is None:
            if backend is None:
                raise ValueError("Either backend or grader is required")
            grader = SinglePassGrader(backend, retry_config=retry_config, sleep=sleep)
        self.grader = grader
        self.warmup_delay = warmup_delay
        self._sleep = sleep

    async def grade(self, request: GradingRequest) -> GradingResponse:
        """Grade once."""
        return await self.grader.grade(request)

    async def _notify_progress(
        self,
        on_progress: Optional[ProgressCallback],
        progress: GradingProgress
    ) -> None:
        """Call the progress callback; a failing callback fails the run."""
        if on_progress is None:
            return
        result = on_progress(progress)
        if asyncio.iscoroutine(result):
            await result

    async def grade_multipass(
        self,
        request: GradingRequest,
        num_runs: int,
        concurrency: int,
        on_progress: Optional[ProgressCallback] = None
    ) -> MultipassResult:
        """
        Grade ``num_runs`` times and reconcile.

        Args:
            request: Question sheet, answer images and model name
            num_runs: Number of gradings
            concurrency: Maximum gradings in flight
            on_progress: Called with a "run-completed" GradingProgress after
                each run, in completion order

        Returns:
            MultipassResult with the reconciled result, per-run results,
            per-question confidences and summed usage

        Raises:
            ValueError: If num_runs < 1
            Exception: The first run or progress callback failure, unchanged
        """
        if num_runs < 1:
            raise ValueError("num_runs must be >= 1")

        worker_count = max(1, min(concurrency, num_runs))
        run_results: List[Optional[GradingResult]] = [None] * num_runs
        run_usages: List[Optional[UsageMetadata]] = [None] * num_runs
        claims = itertools.count()
        completed = 0

        async def run_grading(index: int) -> None:
            nonlocal completed

            # Let the first call populate the backend's context cache
            if 0 < index < concurrency and self.warmup_delay > 0:
                await self._sleep(self.warmup_delay)

            logger.info(f"Grading run {index + 1} of {num_runs}...")
            response = await self.grader.grade(request)

            run_results[index] = response.result
            run_usages[index] = response.usage
            completed += 1
            logger.info(f"Completed grading run {index + 1}")

            await self._notify_progress(
                on_progress,
                GradingProgress(type="run-completed", current=completed, total=num_runs)
            )

        async def worker() -> None:
            while True:
                index = next(claims)
                if index >= num_runs:
                    return
                try:
                    await run_grading(index)
                except Exception as e:
                    logger.error(f"Grading run {index + 1} failed: {e}")
                    raise

        tasks = [asyncio.create_task(worker()) for _ in range(worker_count)]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        all_results = [r for r in run_results if r is not None]
        total_usage = sum((u for u in run_usages if u is not None), UsageMetadata())

        consensus = reconcile(all_results, num_runs)
        logger.info(
            f"Multipass grading done: {consensus.total_score}/{consensus.max_possible_score} "
            f"over {num_runs} runs, {total_usage.total_token_count} tokens"
        )

        return MultipassResult(
            result=consensus.to_grading_result(),
            usage=total_usage,
            confidences=consensus.confidences,
            runs=num_runs,
            results=all_results
        )
