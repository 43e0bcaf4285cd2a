"""
Resolution engine: run every adapter for one email and merge the answers.

Adapters run concurrently on a bounded thread pool, each with its own timeout
and cancel event. Results are buffered by rank and merged only after every
task has settled, so the outcome depends on the confidence order and never on
which source happened to answer first.
"""

import threading
import time
from dataclasses import replace
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from typing import List, Mapping, Optional, Sequence

from .adapters import build_adapters
from .adapters.base import ServiceAdapter
from .config import get_settings
from .errors import ResolutionTimeout
from .logger import get_logger
from .profile import EMPTY_RESULT, ProfileRecord, ResolutionResult, freeze_result
from .schema import validate_profile

logger = get_logger()


def merge_results(ranked_results: Sequence[Mapping[str, ProfileRecord]]) -> ResolutionResult:
    """Merge per-adapter results given highest confidence first.

    On a key collision the higher-confidence value wins and the lower one is
    discarded. This is the same as folding from the lowest-confidence result
    upwards and letting each later update overwrite; keys come out in
    confidence order.
    """
    merged = {}
    for result in ranked_results:
        for service, record in result.items():
            merged.setdefault(service, record)
    return freeze_result(merged)


class _AdapterTask:
    """One adapter invocation: its rank, cancel event and buffered result."""

    def __init__(self, rank: int, adapter: ServiceAdapter):
        self.rank = rank
        self.adapter = adapter
        self.cancel_event = threading.Event()
        self.started_at: Optional[float] = None
        self.future = None
        self.result: ResolutionResult = EMPTY_RESULT

    @property
    def service(self) -> str:
        return self.adapter.service_name

    def run(self, email: str) -> ResolutionResult:
        self.started_at = time.monotonic()
        return self.adapter.lookup(email, self.cancel_event)


class ResolutionEngine:
    """Runs an ordered sequence of adapters and merges their results.

    The order of ``adapters`` is the confidence order: index 0 is the most
    trusted source.
    """

    def __init__(
        self,
        adapters: Sequence[ServiceAdapter],
        max_workers: int = 8,
        adapter_timeout: float = 20.0,
        poll_interval: float = 0.05,
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.adapters = list(adapters)
        self.max_workers = max_workers
        self.adapter_timeout = adapter_timeout
        self.poll_interval = poll_interval

    @classmethod
    def from_settings(cls, settings, transport=None) -> "ResolutionEngine":
        return cls(
            build_adapters(settings, transport=transport),
            max_workers=settings.max_workers,
            adapter_timeout=settings.adapter_timeout_seconds,
        )

    @property
    def services(self) -> List[str]:
        return [a.service_name for a in self.adapters]

    def resolve(self, email: str, timeout: Optional[float] = None) -> ResolutionResult:
        """Resolve ``email`` into a service-name -> ProfileRecord mapping.

        An empty mapping means no source recognised the address. Raises
        ResolutionTimeout when ``timeout`` seconds pass before every adapter
        has settled; the exception carries the partial merge.
        """
        tasks = [_AdapterTask(rank, a) for rank, a in enumerate(self.adapters) if a.enabled]
        if not tasks:
            logger.warning("No enabled adapters; nothing to resolve")
            return EMPTY_RESULT

        started = time.monotonic()
        deadline = None if timeout is None else started + timeout
        pending = list(tasks)

        pool = ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(tasks)),
            thread_name_prefix="profilefinder",
        )
        try:
            for task in tasks:
                task.future = pool.submit(task.run, email)

            while pending:
                now = time.monotonic()
                for task in list(pending):
                    if task.future.done():
                        self._collect(task)
                        pending.remove(task)
                    elif task.started_at is not None and now - task.started_at >= self.adapter_timeout:
                        self._expire(task)
                        pending.remove(task)
                if not pending or (deadline is not None and now >= deadline):
                    break
                wait(
                    [t.future for t in pending],
                    timeout=self._next_wait(pending, deadline, now),
                    return_when=FIRST_COMPLETED,
                )
        finally:
            # Never join: a hung adapter must not hold up the caller
            pool.shutdown(wait=False, cancel_futures=True)

        if pending:
            for task in pending:
                task.cancel_event.set()
                task.future.cancel()
            partial = merge_results([t.result for t in tasks])
            names = [t.service for t in pending]
            logger.warning("Resolution timed out", pending=names, found=list(partial))
            raise ResolutionTimeout(
                f"Resolution timed out after {timeout}s with {len(names)} adapters pending",
                partial=partial,
                pending=names,
            )

        merged = merge_results([t.result for t in tasks])
        logger.debug(
            "Resolution finished",
            adapters=len(tasks),
            services=list(merged),
            duration_ms=round((time.monotonic() - started) * 1000),
        )
        return merged

    def _next_wait(self, pending, deadline: Optional[float], now: float) -> float:
        waits = []
        for task in pending:
            if task.started_at is None:
                waits.append(self.poll_interval)
            else:
                waits.append(task.started_at + self.adapter_timeout - now)
        if deadline is not None:
            waits.append(deadline - now)
        return max(0.0, min(waits))

    def _collect(self, task: _AdapterTask) -> None:
        try:
            result = task.future.result()
        except Exception as e:
            # Failure isolation: a broken adapter counts as "nothing found"
            logger.error(f"{task.service} adapter raised", error=repr(e))
            logger.record_lookup_failure(task.service, "adapter_error")
            return

        records = {}
        for service, record in (result or {}).items():
            if not isinstance(record, ProfileRecord):
                logger.warning("Dropping non-profile value", adapter=task.service, service=service)
                continue
            errors = validate_profile(record.to_dict())
            if errors:
                # Only the portrait shape can fail for a ProfileRecord; keep the rest
                logger.warning("Blanking invalid portrait", adapter=task.service, service=service, errors=errors)
                record = replace(record, portrait_url="")
            records[service] = record
        task.result = freeze_result(records)

    def _expire(self, task: _AdapterTask) -> None:
        task.cancel_event.set()
        task.future.cancel()
        logger.warning(f"{task.service} adapter timed out", timeout=self.adapter_timeout)
        logger.record_lookup_failure(task.service, "timeout")


def find_by_email(email: str, settings=None, timeout: Optional[float] = None) -> ResolutionResult:
    """Resolve ``email`` with the built-in adapters configured from Settings."""
    settings = settings or get_settings()
    engine = ResolutionEngine.from_settings(settings)
    if timeout is None:
        timeout = settings.resolution_timeout_seconds
    return engine.resolve(email, timeout=timeout)
