"""
Batch Risk Analysis

Admin-triggered "analyze every eligible form". Each form is an independent
task (fan-out), bounded by a semaphore so the data source is not hit with
too many large reads at once, and joined into one report (fan-in).

- One form failing never aborts the others; its error is reported.
- On timeout the remaining forms are not awaited and are reported as
  TIMEOUT errors. A worker thread cannot be interrupted, so a timed-out
  analysis keeps its slot in the shared pool until it returns.
- Work runs on one process-wide pool of RISK_BATCH_CONCURRENCY threads,
  so back-to-back batches never exceed that many concurrent reads even
  while earlier timed-out work is still finishing.
- Read-only and idempotent: unchanged data gives an identical result.

Version: risk_aversion_v1
"""

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional

from survey_analytics import config
from survey_analytics.forms.repository import FormRepository
from survey_analytics.shared.errors import AnalyticsError, AnalyticsErrorCode
from survey_analytics.shared.hashing import canonicalize_and_hash

from .models import BatchRiskAnalysis, FormError, PopulationRiskResult

logger = logging.getLogger(__name__)

FormAnalysis = Callable[[str], PopulationRiskResult]

_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def _get_executor() -> ThreadPoolExecutor:
    """Process-wide worker pool shared by every batch run."""
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(
                max_workers=max(1, config.RISK_BATCH_CONCURRENCY),
                thread_name_prefix="risk-batch",
            )
        return _executor


async def _run_form(
    form_id: str,
    analyze: FormAnalysis,
    semaphore: asyncio.Semaphore,
) -> PopulationRiskResult:
    async with semaphore:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(_get_executor(), analyze, form_id)


def _to_form_error(exc: BaseException) -> FormError:
    if isinstance(exc, AnalyticsError):
        return FormError(code=exc.error_code.value, message=exc.message)
    return FormError(
        code=AnalyticsErrorCode.INTERNAL_ERROR.value,
        message=f"{type(exc).__name__}: {exc}",
    )


async def run_batch(
    form_ids: List[str],
    analyze: FormAnalysis,
    concurrency: Optional[int] = None,
    timeout: Optional[float] = None,
) -> BatchRiskAnalysis:
    """
    Analyze many forms concurrently.

    Args:
        form_ids: Forms to analyze
        analyze: Blocking per-form analysis (load + compute); run on the shared pool
        concurrency: Max forms in flight for this batch (the pool size still caps it)
        timeout: Seconds to wait for the whole batch; None waits forever

    Returns:
        BatchRiskAnalysis with per-form results and errors
    """
    concurrency = max(1, concurrency or config.RISK_BATCH_CONCURRENCY)
    semaphore = asyncio.Semaphore(concurrency)
    unique_ids = sorted(set(form_ids))

    tasks: Dict[str, asyncio.Task] = {
        form_id: asyncio.create_task(_run_form(form_id, analyze, semaphore))
        for form_id in unique_ids
    }

    pending = set()
    if tasks:
        _, pending = await asyncio.wait(tasks.values(), timeout=timeout)
        for task in pending:
            task.cancel()

    results: Dict[str, PopulationRiskResult] = {}
    errors: Dict[str, FormError] = {}
    for form_id in unique_ids:
        task = tasks[form_id]
        if task in pending:
            errors[form_id] = FormError(
                code=AnalyticsErrorCode.TIMEOUT.value,
                message=f"Analysis did not finish within {timeout}s",
            )
            continue
        exc = task.exception()
        if exc is not None:
            logger.warning(f"Risk analysis failed for form {form_id}: {exc}")
            errors[form_id] = _to_form_error(exc)
        else:
            results[form_id] = task.result()

    batch = BatchRiskAnalysis(
        results=results,
        errors=errors,
        forms_total=len(unique_ids),
        forms_succeeded=len(results),
        forms_failed=len(errors),
    )
    batch.result_hash = canonicalize_and_hash(batch)
    return batch


async def perform_risk_analysis(
    repository: FormRepository,
    analyze: FormAnalysis,
    concurrency: Optional[int] = None,
    timeout: Optional[float] = config.RISK_BATCH_TIMEOUT_SECONDS,
) -> BatchRiskAnalysis:
    """Analyze every published form in the repository."""
    loop = asyncio.get_running_loop()
    form_ids = await loop.run_in_executor(_get_executor(), repository.list_published_form_ids)
    logger.info(f"Batch risk analysis started for {len(form_ids)} forms")
    batch = await run_batch(form_ids, analyze, concurrency=concurrency, timeout=timeout)
    logger.info(
        f"Batch risk analysis finished: {batch.forms_succeeded} succeeded, "
        f"{batch.forms_failed} failed"
    )
    return batch
