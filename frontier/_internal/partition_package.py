from .utils import cache_urls

# PartitionPackage collects the outcome of a routing run: which URLs were
# assigned to which partition key, and how many were rejected or dropped.
class PartitionPackage():
    def __init__(self):
        self.partitions = {}
        self.rejected = []
        self.dropped = {}
        self.total_routed = 0

    def add_routed(self, key, urls):
        self.total_routed += len(urls)
        cache_urls(self.partitions, key, urls)

    def add_rejected(self, url):
        self.rejected.append(url)

    def add_dropped(self, reason, url):
        cache_urls(self.dropped, reason, [url])

    @property
    def total_rejected(self):
        return len(self.rejected)

    @property
    def total_dropped(self):
        return sum([len(self.dropped[reason]) for reason in self.dropped])

    def partition_sizes(self):
        return {key: len(self.partitions[key]) for key in self.partitions}

    def get_urls(self, key):
        return list(self.partitions.get(key, []))
