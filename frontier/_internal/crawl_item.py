from collections import namedtuple
import json

from . import log
from .metadata import Metadata

logger = log.logger()

# Reasons for which an item is dropped by the routing stage.
INVALID_URL = "invalid-url"
RESOLUTION_FAILED = "resolution-failed"
ERROR = "error"

# CrawlItem is one candidate URL flowing through the frontier, together with
# the metadata of the document it was found in. The URL string is never
# modified by the frontier.
class CrawlItem:
    def __init__(self, url, metadata=None):
        self.url = url
        self.metadata = metadata

    @classmethod
    def from_json(cls, obj):
        url = obj.get("url")
        if not isinstance(url, str):
            raise ValueError(f"Item has no url: {obj!r}")
        metadata = obj.get("metadata")
        if metadata is not None and not isinstance(metadata, dict):
            raise ValueError(f"Item metadata must be an object: {obj!r}")
        return cls(url, Metadata(metadata))

    def __repr__(self):
        return f"CrawlItem({self.url!r}, {self.metadata!r})"

# Drop is returned instead of a partition key when a URL cannot be routed.
Drop = namedtuple('Drop', ['reason'])

# Outcomes of the routing stage, one per item.
Rejected = namedtuple('Rejected', ['url'])
Routed = namedtuple('Routed', ['url', 'key', 'metadata'])
Dropped = namedtuple('Dropped', ['url', 'reason'])

# load_items reads one JSON item per line. Lines that are not a valid item are
# logged and skipped.
def load_items(fpath):
    items = []
    with open(fpath, "r") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if line == "":
                continue
            try:
                items.append(CrawlItem.from_json(json.loads(line)))
            except (ValueError, AttributeError) as e:
                logger.warning(f"Skipping line {lineno} of '{fpath}': {e}")
    return items
