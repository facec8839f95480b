from ._internal.crawl_item import CrawlItem, Drop, Dropped, Rejected, Routed
from ._internal.filter_tree import Branch, FilterConfigError, FilterOperation, FilterTree, Leaf, evaluate
from ._internal.metadata import Metadata
from ._internal.metadata_filter import MetadataFilter, build
from ._internal.partitioner import PartitionMode, URLPartitioner
from ._internal.resolver_cache import ResolverCache
from ._internal.router import Router
