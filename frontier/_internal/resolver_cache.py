from collections import OrderedDict
from collections import namedtuple
from threading import Lock
import time

from . import log
from .crawl_item import Drop
from .crawl_item import RESOLUTION_FAILED

logger = log.logger()

DEFAULT_CAPACITY = 500

Resolution = namedtuple('Resolution', ['ip', 'from_cache'])

# ResolverCache maps host names to IP literals. It holds at most `capacity`
# entries and evicts the least recently used one. Reads count as use.
#
# All reads, writes and evictions happen under a single lock. DNS lookups are
# done outside of it, so a slow lookup only blocks the thread that asked.
class ResolverCache:
    def __init__(self, capacity=DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Cache capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        # Ordered from least to most recently used.
        self._entries = OrderedDict()
        self._lock = Lock()

    def get(self, host):
        with self._lock:
            ip = self._entries.get(host)
            if ip is not None:
                self._entries.move_to_end(host)
            return ip

    def put(self, host, ip):
        with self._lock:
            self._entries[host] = ip
            self._entries.move_to_end(host)
            while len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted '{evicted}' from resolver cache")

    # hosts returns the cached hosts from least to most recently used.
    def hosts(self):
        with self._lock:
            return list(self._entries.keys())

    # get_or_resolve returns a Resolution, or Drop if resolve raised. Nothing
    # is cached for a failed lookup.
    def get_or_resolve(self, host, resolve):
        ip = self.get(host)
        if ip is not None:
            return Resolution(ip, True)

        start = time.monotonic()
        try:
            ip = resolve(host)
        except (OSError, ValueError) as e:
            logger.warning(f"Unable to resolve IP for: {host} ({e})")
            return Drop(RESOLUTION_FAILED)
        if not ip:
            logger.warning(f"Unable to resolve IP for: {host} (no address)")
            return Drop(RESOLUTION_FAILED)
        elapsed_ms = (time.monotonic() - start) * 1000
        logger.debug(f"Resolved IP {ip} in {elapsed_ms:.1f} msec for : {host}")

        self.put(host, ip)
        return Resolution(ip, False)

    # __contains__ does not count as a use.
    def __contains__(self, host):
        with self._lock:
            return host in self._entries

    def __len__(self):
        with self._lock:
            return len(self._entries)
