# Standard libraries
import concurrent.futures
from datetime import datetime
from threading import get_ident

from . import log
from .counters import EventCounter
from .crawl_item import Dropped
from .crawl_item import Rejected
from .crawl_item import Routed
from .crawl_item import ERROR
from .metadata_filter import MetadataFilter
from .partition_package import PartitionPackage
from .partitioner import URLPartitioner

logger = log.logger()

# Router is the admission and routing stage of the frontier. Every item first
# goes through the metadata filter; admitted items are then given a partition
# key. Each item gets exactly one outcome: Rejected, Routed or Dropped.
class Router:
    #
    # ALL THESE CONSTANTS ARE READ-ONLY.
    #

    _default_max_workers = 8
    _max_workers_limit = 128

    def __init__(self, url_filter=None, partitioner=None, max_workers=None):
        self._url_filter = url_filter if url_filter is not None else MetadataFilter()
        self._partitioner = partitioner if partitioner is not None else URLPartitioner()

        if max_workers is None:
            max_workers = self._default_max_workers
        # Maximum number of threads the pool is allowed to spawn
        self._max_workers = max(min(max_workers, self._max_workers_limit), 1)

        self.counter = EventCounter("Router")

    @property
    def partitioner(self):
        return self._partitioner

    # process never raises: anything unexpected while handling one item is
    # logged and the item is dropped, so the rest of the batch goes on.
    def process(self, item):
        tid = get_ident()
        try:
            if self._url_filter.filter(item.url, item.metadata) is None:
                self.counter.incr("rejected")
                return Rejected(item.url)
            self.counter.incr("admitted")
            return self._partitioner.execute(item)
        except Exception as e:
            logger.error(f"({tid}) Received uncaught exception while routing "+
                         f"'{item.url}': {e}. Dropping it.", exc_info=True)
            self.counter.incr("error")
            return Dropped(item.url, ERROR)

    # run processes items concurrently and returns their outcomes in input
    # order.
    def run(self, items):
        with concurrent.futures.ThreadPoolExecutor(
                max_workers=self._max_workers,
        ) as executor:
            return list(executor.map(self.process, items))

    # run_timed calls run(), measures elapsed time and aggregates the outcomes
    # in a PartitionPackage.
    def run_timed(self, items):
        before = datetime.now()

        outcomes = self.run(items)

        elapsed = datetime.now() - before
        logger.info(f"Elapsed time: {elapsed}")

        package = self.package(outcomes)
        self._print_statistics(package)

        return outcomes, package, (
            f"{package.total_routed} URLs were routed to "+
            f"{len(package.partitions)} partitions, "+
            f"{package.total_rejected} rejected, {package.total_dropped} "+
            f"dropped. Elapsed time: {elapsed}")

    def package(self, outcomes):
        package = PartitionPackage()
        for outcome in outcomes:
            if isinstance(outcome, Routed):
                package.add_routed(outcome.key, [outcome.url])
            elif isinstance(outcome, Rejected):
                package.add_rejected(outcome.url)
            else:
                package.add_dropped(outcome.reason, outcome.url)
        return package

    def _print_statistics(self, package):
        logger.info(f"Number of routed URLs: {package.total_routed}")
        logger.info(f"Number of partitions: {len(package.partitions)}")
        logger.info(f"Number of rejected URLs: {package.total_rejected}")
        logger.info(f"Number of dropped URLs: {package.total_dropped}")
        logger.info(f"Router events: {self.counter.snapshot()}")
        logger.info(f"Partitioner events: {self._partitioner.counter.snapshot()}")
        logger.info(f"Resolver cache size: {len(self._partitioner.cache)}")
