"""
Bounded batch scheduler.

Independent units of work are cut into batches of at most ``batch_size`` and
handed to a fixed pool of worker threads. Each batch is a join barrier: the
coordinator receives a batch's results only after every worker in it has
finished, and merges them into shared state on its own thread before the next
batch is dispatched.
"""
import logging
from itertools import islice
from typing import Any, Callable, Iterable, Iterator, List, Tuple

from joblib import Parallel, delayed

logger = logging.getLogger(__name__)


class BatchScheduler:
    """
    Batch-and-join dispatcher over a fixed-size thread pool.

    With ``num_procs`` processors one is left to the coordinator, so a batch
    holds ``num_procs - 1`` units (at least one).
    """

    def __init__(self, num_procs: int = 4, name: str = 'batch'):
        if num_procs < 1:
            raise ValueError(f"num_procs must be >= 1, got {num_procs}")
        self.num_procs = num_procs
        self.batch_size = max(1, num_procs - 1)
        self.name = name

    def batches(self, units: Iterable[Any]) -> Iterator[List[Any]]:
        it = iter(units)
        while True:
            batch = list(islice(it, self.batch_size))
            if not batch:
                return
            yield batch

    def map_batches(self, func: Callable[[Any], Any], units: Iterable[Any]) -> Iterator[Tuple[List[Any], List[Any]]]:
        """
        Run ``func`` over ``units`` one batch at a time.

        Yields ``(batch, results)`` after each join, results in unit order. An
        exception raised by a worker propagates to the coordinator once its
        batch has been joined.
        """
        dispatched = 0
        with Parallel(n_jobs=self.batch_size, require='sharedmem') as parallel:
            for number, batch in enumerate(self.batches(units)):
                results = parallel(delayed(func)(unit) for unit in batch)
                dispatched += len(batch)
                logger.debug("%s: joined batch %d (%d units, %d total)", self.name, number, len(batch), dispatched)
                yield batch, results

    def __repr__(self):
        return f"BatchScheduler(name='{self.name}', num_procs={self.num_procs}, batch_size={self.batch_size})"
