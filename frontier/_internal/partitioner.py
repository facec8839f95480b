from enum import Enum

from . import log
from .counters import EventCounter
from .crawl_item import Drop
from .crawl_item import Dropped
from .crawl_item import INVALID_URL
from .crawl_item import Routed
from .metadata import Metadata
from .resolver_cache import ResolverCache
from .utils import extract_host
from .utils import is_blank
from .utils import registrable_domain
from .utils import resolve_ip
from .utils import IP_METADATA_KEY

logger = log.logger()

class PartitionMode(Enum):
    HOST = "byHost"
    DOMAIN = "byDomain"
    IP = "byIP"

    # from_config accepts HOST/DOMAIN/IP or byHost/byDomain/byIP in any
    # case. Anything else falls back to HOST.
    @classmethod
    def from_config(cls, value):
        if isinstance(value, PartitionMode):
            return value
        if value is None or value == "":
            return cls.HOST
        normalized = str(value).strip().lower()
        for mode in cls:
            if normalized in (mode.name.lower(), mode.value.lower()):
                return mode
        logger.warning(f"Unknown partition mode : {value} - forcing to "+
                       f"{cls.HOST.value}")
        return cls.HOST

# URLPartitioner computes the partition key that decides which downstream
# worker owns a URL: its host, its registrable domain, or its IP address.
#
# One partitioner, and the ResolverCache inside it, is shared by all worker
# threads.
class URLPartitioner:
    def __init__(self, mode=PartitionMode.HOST, cache=None, resolver=None,
                 counter=None):
        self.mode = PartitionMode.from_config(mode)
        self.cache = cache if cache is not None else ResolverCache()
        self.resolver = resolver if resolver is not None else resolve_ip
        self.counter = counter if counter is not None else EventCounter("URLPartitioner")
        logger.info(f"Using partition mode : {self.mode.value}")

    # select returns the partition key for url, or a Drop explaining why there
    # is none. It never raises for a bad URL or a failed lookup.
    def select(self, url, metadata=None):
        if metadata is None:
            metadata = Metadata()

        if self.mode is PartitionMode.IP:
            ip_provided = metadata.get_first_value(IP_METADATA_KEY)
            if not is_blank(ip_provided):
                self.counter.incr("provided")
                logger.debug(f"Partition Key for: {url} > {ip_provided}")
                return ip_provided

        host = extract_host(url)
        if host is None:
            self.counter.incr("invalid URL")
            logger.warning(f"Invalid URL: {url}")
            return Drop(INVALID_URL)

        if self.mode is PartitionMode.HOST:
            partition_key = host
        elif self.mode is PartitionMode.DOMAIN:
            partition_key = registrable_domain(host)
        else:
            resolution = self.cache.get_or_resolve(host, self.resolver)
            if isinstance(resolution, Drop):
                self.counter.incr("unable to resolve IP")
                return resolution
            if resolution.from_cache:
                self.counter.incr("from cache")
            else:
                self.counter.incr("resolved")
            partition_key = resolution.ip

        logger.debug(f"Partition Key for: {url} > {partition_key}")
        return partition_key

    # execute routes a CrawlItem: Routed with the unmodified URL and metadata,
    # or Dropped.
    def execute(self, item):
        metadata = item.metadata if item.metadata is not None else Metadata()
        key = self.select(item.url, metadata)
        if isinstance(key, Drop):
            return Dropped(item.url, key.reason)
        return Routed(item.url, key, metadata)
