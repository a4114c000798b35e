"""Batch cleaning orchestration engine."""

from __future__ import annotations

import logging
import os
import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable

from svgsweep.core.compressor import Compressor, get_compressor
from svgsweep.core.output import OutputResolver, should_compress
from svgsweep.core.registry import RuleRegistry
from svgsweep.core.scanner import FileScanner
from svgsweep.core.stats import StatsAggregator
from svgsweep.core.transformer import ContentTransformer
from svgsweep.errors import FatalError, FileError, InvalidConfig, PathConflict
from svgsweep.models.config import RunConfig
from svgsweep.models.stats import RunReport, RunState
from svgsweep.models.task import FileResult, FileTask, Outcome

log = logging.getLogger(__name__)

ResultCallback = Callable[[FileResult], None]
StateCallback = Callable[[RunState], None]

_DONE = object()


class FilePipeline:
    """Read → transform → compress → write for a single file.

    Shared by every worker. ``claim_destinations`` must run before the
    workers start; after that the pipeline is read-only.
    """

    def __init__(
        self,
        config: RunConfig,
        transformer: ContentTransformer,
        resolver: OutputResolver,
        compressor: Compressor,
    ) -> None:
        self.config = config
        self.transformer = transformer
        self.resolver = resolver
        self.compressor = compressor
        self._taken: dict[Path, Path] = {}

    def claim_destinations(self, tasks: list[FileTask]) -> None:
        """Assign each shared destination to the first task in scan order."""
        self._taken = self.resolver.shared_destinations(tasks, self.config)
        for source, owner in self._taken.items():
            log.warning("%s has the same destination as %s and will not be written", source, owner)

    def process(self, task: FileTask) -> FileResult:
        """Process ``task``. Any failure becomes a crashed result."""
        start = time.perf_counter_ns()
        try:
            destination, size_after = self._process(task)
        except FileError as exc:
            log.warning("Failed to clean %s: %s", task.source_path, exc)
            return FileResult.crashed(task, time.perf_counter_ns() - start, str(exc))
        except Exception as exc:
            log.exception("Unexpected error while cleaning %s", task.source_path)
            return FileResult.crashed(
                task, time.perf_counter_ns() - start, f"Internal error: {exc}"
            )

        elapsed = time.perf_counter_ns() - start
        log.debug("Cleaned %s -> %s (%d -> %d bytes)", task.source_path, destination,
                  task.size_before, size_after)
        return FileResult(
            task=task,
            outcome=Outcome.CLEANED,
            elapsed_ns=elapsed,
            size_after=size_after,
            destination=destination,
        )

    def _process(self, task: FileTask):
        compressed = should_compress(task, self.config)
        destination = self.resolver.destination(task, compressed)
        owner = self._taken.get(task.source_path)
        if owner is not None:
            raise PathConflict(f"Destination {destination} is also written from {owner}")

        try:
            raw = task.source_path.read_bytes()
        except OSError as exc:
            raise FileError(f"Cannot read {task.source_path}: {exc}") from exc

        data = self.transformer.clean(raw, task.is_compressed_input)
        if compressed:
            data = self.compressor.compress(data, self.config.compression.level)

        self.resolver.write(task, destination, data)
        return destination, len(data)


class RunController:
    """Drives one batch run at a time.

    Lifecycle: IDLE → SCANNING → RUNNING → COMPLETED | CANCELLED | FATAL.
    Workers claim tasks from a pre-filled queue and post results to a
    channel; a single aggregator thread folds them into the run stats
    and forwards them to ``on_result``.
    """

    def __init__(
        self,
        registry: RuleRegistry,
        on_result: ResultCallback | None = None,
        on_state: StateCallback | None = None,
        max_threads: int | None = None,
    ) -> None:
        self.registry = registry
        self.on_result = on_result
        self.on_state = on_state
        self.max_threads = max(1, max_threads or os.cpu_count() or 1)
        self._state = RunState.IDLE
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._report: RunReport | None = None

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def report(self) -> RunReport | None:
        """Report of the last finished run, if any."""
        return self._report

    def clamp_threads(self, requested: int) -> int:
        return min(max(1, requested), self.max_threads)

    # -- Run control --

    def start(self, config: RunConfig) -> None:
        """Start a run in the background and return immediately."""
        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError("A run is already in progress")
        self._stop.clear()
        self._report = None
        self._thread = threading.Thread(
            target=self._execute, args=(config,), name="svgsweep-run", daemon=True
        )
        self._thread.start()

    def cancel(self) -> None:
        """Ask the run to stop after the files currently being cleaned."""
        if not self._stop.is_set():
            log.info("Cancel requested")
        self._stop.set()

    def wait(self, timeout: float | None = None) -> RunReport:
        """Block until the background run finishes and return its report."""
        if self._thread is None:
            raise RuntimeError("No run has been started")
        self._thread.join(timeout)
        if self._thread.is_alive():
            raise TimeoutError("Run did not finish in time")
        if self._report is None:
            raise RuntimeError("Run ended without a report")
        return self._report

    def run(self, config: RunConfig, *, raise_fatal: bool = False) -> RunReport:
        """Run synchronously in the calling thread.

        Args:
            config: Run configuration.
            raise_fatal: Re-raise the fatal error instead of only reporting it.
        """
        self._stop.clear()
        report = self._execute(config)
        if raise_fatal and report.error is not None:
            raise report.error
        return report

    # -- Internals --

    def _set_state(self, state: RunState) -> None:
        self._state = state
        log.debug("Run state: %s", state.value)
        if self.on_state:
            try:
                self.on_state(state)
            except Exception:
                log.exception("State callback failed")

    def _execute(self, config: RunConfig) -> RunReport:
        try:
            return self._execute_run(config)
        except Exception as exc:
            log.exception("Run failed unexpectedly")
            report = RunReport(state=RunState.FATAL, error=FatalError(f"Internal error: {exc}"))
            self._finish(report)
            return report

    def _execute_run(self, config: RunConfig) -> RunReport:
        self._set_state(RunState.SCANNING)
        try:
            pipeline = self._prepare(config)
            tasks = FileScanner.for_config(config).collect()
        except FatalError as exc:
            log.error("Run aborted: %s", exc)
            report = RunReport(state=RunState.FATAL, error=exc)
            self._finish(report)
            return report

        aggregator = StatsAggregator(len(tasks))
        results: list[FileResult] = []

        if self._stop.is_set():
            report = RunReport(state=RunState.CANCELLED, stats=aggregator.snapshot())
            self._finish(report)
            return report

        pipeline.claim_destinations(tasks)
        threads = self.clamp_threads(config.thread_count)
        self._set_state(RunState.RUNNING)
        log.info("Cleaning %d files with %d threads", len(tasks), threads)

        pending: queue.Queue[FileTask] = queue.Queue(maxsize=len(tasks))
        for task in tasks:
            pending.put_nowait(task)
        channel: queue.SimpleQueue = queue.SimpleQueue()

        collector = threading.Thread(
            target=self._aggregate,
            args=(channel, aggregator, results),
            name="svgsweep-aggregator",
            daemon=True,
        )
        collector.start()

        try:
            with ThreadPoolExecutor(max_workers=threads, thread_name_prefix="svgsweep-worker") as executor:
                futures = [
                    executor.submit(self._worker, pending, channel, pipeline)
                    for _ in range(threads)
                ]
                for future in futures:
                    future.result()
        finally:
            channel.put(_DONE)
            collector.join()

        state = RunState.CANCELLED if self._stop.is_set() else RunState.COMPLETED
        report = RunReport(state=state, stats=aggregator.snapshot(), results=results)
        stats = report.stats
        log.info(
            "Run %s: %d cleaned, %d crashed of %d",
            state.value, stats.cleaned_count, stats.crashed_count, stats.total_count,
        )
        self._finish(report)
        return report

    def _finish(self, report: RunReport) -> None:
        self._report = report
        self._set_state(report.state)

    def _prepare(self, config: RunConfig) -> FilePipeline:
        """Validate ``config`` and build the per-file pipeline.

        Raises:
            InvalidConfig: if the config or the rule selection is invalid, or
                the selected compressor is not available.
        """
        config.validate()
        rules = self.registry.resolve(config.clean.rules)

        if config.compression.enabled:
            compressor = get_compressor(config.compression.compressor)
            if not compressor.is_available():
                raise InvalidConfig(
                    f"Compressor '{compressor.id}' is not available: {compressor.unavailable_reason}"
                )
        else:
            # Used only for svgz originals in overwrite mode
            compressor = get_compressor("gzip")

        return FilePipeline(
            config=config,
            transformer=ContentTransformer(rules, config.clean),
            resolver=OutputResolver(config.naming, recursive=config.recursive),
            compressor=compressor,
        )

    def _worker(
        self,
        pending: queue.Queue[FileTask],
        channel: queue.SimpleQueue,
        pipeline: FilePipeline,
    ) -> int:
        """Claim and process tasks until the queue is empty or a stop is requested."""
        processed = 0
        while not self._stop.is_set():
            try:
                task = pending.get_nowait()
            except queue.Empty:
                break
            channel.put(pipeline.process(task))
            processed += 1
        return processed

    def _aggregate(
        self,
        channel: queue.SimpleQueue,
        aggregator: StatsAggregator,
        results: list[FileResult],
    ) -> None:
        """Single consumer of the result channel."""
        while True:
            item = channel.get()
            if item is _DONE:
                return
            aggregator.add(item)
            results.append(item)
            if self.on_result:
                try:
                    self.on_result(item)
                except Exception:
                    log.exception("Result callback failed")
