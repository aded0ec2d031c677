# catalog-it Scanner
# Bounded-concurrency batch runner with per-item outcome capture

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from catalog_it.catalog.model import Item
from catalog_it.errors import ConfigurationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ScanState(str, Enum):
    """Lifecycle of one item within a scan."""

    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class ItemFailure:
    """A failed item and the error it raised."""

    item_id: str
    error: BaseException

    @property
    def message(self) -> str:
        """Error text for display."""
        return str(self.error) or type(self.error).__name__


@dataclass
class ScanOutcome(Generic[T]):
    """Terminal outcome of one item's operation."""

    item_id: str
    state: ScanState
    value: T | None = None
    error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        """Check if the operation succeeded."""
        return self.state == ScanState.SUCCEEDED


@dataclass
class ScanResult(Generic[T]):
    """Result of a complete scan."""

    total: int = 0
    succeeded: int = 0
    failures: list[ItemFailure] = field(default_factory=list)
    outcomes: list[ScanOutcome[T]] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        """Check if any item failed."""
        return len(self.failures) > 0

    @property
    def success(self) -> bool:
        """Check if every item succeeded."""
        return not self.has_failures

    @property
    def values(self) -> list[T]:
        """Return values of the successful operations, in completion order."""
        return [outcome.value for outcome in self.outcomes if outcome.succeeded]


class Scan(Generic[T]):
    """
    One bounded-concurrency pass over a set of items.

    Items are handed to a fixed-size worker pool in input order, so at most
    ``concurrency_limit`` operations run at once and the next queued item
    starts as soon as any running one finishes. Every exception an operation
    raises is captured as that item's failure; nothing aborts the batch.
    """

    def __init__(self, items: Iterable[Item], operation: Callable[[Item], T], concurrency_limit: int):
        """
        Initialize scan.

        Args:
            items: Items to process.
            operation: Per-item operation; raising marks the item failed.
            concurrency_limit: Maximum operations in flight, at least 1.

        Raises:
            ConfigurationError: If the concurrency limit is not a positive integer.
        """
        if isinstance(concurrency_limit, bool) or not isinstance(concurrency_limit, int) or concurrency_limit < 1:
            raise ConfigurationError(f"Concurrency limit must be a positive integer, got {concurrency_limit!r}")

        self.items = list(items)
        self.operation = operation
        self.concurrency_limit = concurrency_limit
        self.states: dict[str, ScanState] = {item.id: ScanState.PENDING for item in self.items}

    def _run_one(self, item: Item) -> ScanOutcome[T]:
        """Run the operation for one item, reflecting any error into the outcome."""
        self.states[item.id] = ScanState.IN_FLIGHT
        try:
            value = self.operation(item)
        except Exception as e:
            logger.warning("Item %s failed: %s", item.id, e)
            return ScanOutcome(item_id=item.id, state=ScanState.FAILED, error=e)
        return ScanOutcome(item_id=item.id, state=ScanState.SUCCEEDED, value=value)

    def run(self, on_outcome: Callable[[ScanOutcome[T]], Any] | None = None) -> ScanResult[T]:
        """
        Run the operation over every item.

        Args:
            on_outcome: Called in the coordinating thread as each item finishes.

        Returns:
            ScanResult with the success count and every failure.
        """
        result: ScanResult[T] = ScanResult(total=len(self.items))
        if not self.items:
            return result

        logger.debug("Scanning %d items with concurrency %d", len(self.items), self.concurrency_limit)
        with ThreadPoolExecutor(max_workers=self.concurrency_limit, thread_name_prefix="catalog-scan") as pool:
            futures = [pool.submit(self._run_one, item) for item in self.items]

            for future in as_completed(futures):
                outcome = future.result()
                self.states[outcome.item_id] = outcome.state
                result.outcomes.append(outcome)

                if outcome.succeeded:
                    result.succeeded += 1
                else:
                    result.failures.append(ItemFailure(item_id=outcome.item_id, error=outcome.error))

                if on_outcome is not None:
                    on_outcome(outcome)

        return result


def scan(
    items: Iterable[Item],
    operation: Callable[[Item], T],
    concurrency_limit: int,
    *,
    on_outcome: Callable[[ScanOutcome[T]], Any] | None = None,
) -> ScanResult[T]:
    """
    Apply an operation across items with a concurrency ceiling.

    A limit of 1 processes items strictly one after another.

    Args:
        items: Items to process.
        operation: Per-item operation; raising marks the item failed.
        concurrency_limit: Maximum operations in flight, at least 1.
        on_outcome: Optional callback for each finished item.

    Returns:
        ScanResult with ``succeeded`` and ``failures``. The caller decides
        whether failures fail the run.
    """
    return Scan(items, operation, concurrency_limit).run(on_outcome=on_outcome)
