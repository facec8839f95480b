import socket

from .._internal.crawl_item import CrawlItem
from .._internal.crawl_item import Dropped
from .._internal.crawl_item import ERROR
from .._internal.crawl_item import INVALID_URL
from .._internal.crawl_item import Rejected
from .._internal.crawl_item import RESOLUTION_FAILED
from .._internal.crawl_item import Routed
from .._internal.metadata import Metadata
from .._internal.metadata_filter import MetadataFilter
from .._internal.partitioner import PartitionMode
from .._internal.partitioner import URLPartitioner
from .._internal.router import Router

def fake_resolver(host):
    if host.endswith(".invalid"):
        raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")
    return "10.0.0." + str(len(host))

class ExplodingFilter:
    def filter(self, url, metadata):
        if "boom" in url:
            raise RuntimeError("boom")
        return url

class TestRouter:
    def build_router(self, params=None, mode=PartitionMode.HOST, max_workers=4):
        partitioner = URLPartitioner(mode=mode, resolver=fake_resolver)
        return Router(MetadataFilter.from_params(params), partitioner,
                      max_workers=max_workers)

    def test_admitted_and_routed(self):
        router = self.build_router({"key": "val"})
        item = CrawlItem("http://www.example.com/", Metadata({"key": "val2"}))

        outcome = router.process(item)

        assert outcome == Routed("http://www.example.com/", "www.example.com",
                                 item.metadata)
        assert router.counter.get("admitted") == 1

    def test_rejected(self):
        router = self.build_router({"key": "val"})
        item = CrawlItem("http://www.example.com/", Metadata({"key": "val"}))

        assert router.process(item) == Rejected("http://www.example.com/")
        assert router.counter.get("rejected") == 1

    def test_rejected_before_partitioning(self):
        router = self.build_router({"key": "val"})
        item = CrawlItem("not a url", Metadata({"key": "val"}))

        assert router.process(item) == Rejected("not a url")
        assert router.partitioner.counter.get("invalid URL") == 0

    def test_invalid_url_dropped(self):
        router = self.build_router()
        outcome = router.process(CrawlItem("not a url"))
        assert outcome == Dropped("not a url", INVALID_URL)
        assert router.partitioner.counter.get("invalid URL") == 1

    def test_unexpected_error_dropped(self):
        router = Router(ExplodingFilter(), URLPartitioner())

        outcome = router.process(CrawlItem("http://boom.example.com/"))

        assert outcome == Dropped("http://boom.example.com/", ERROR)
        assert router.counter.get("error") == 1

    def test_run_keeps_order_and_isolates_failures(self):
        router = self.build_router({"operation": "AND",
                                    "filters": {"key": "val", "key2": "val2"}},
                                   mode=PartitionMode.IP)
        items = [
            CrawlItem("http://a.example.com/1", Metadata({"key": "val"})),
            CrawlItem("http://host.invalid/"),
            CrawlItem("http://a.example.com/2",
                      Metadata({"key": "val", "key2": "val2"})),
            CrawlItem("::not a url::"),
            CrawlItem("http://b.example.com/", Metadata({"ip": "1.2.3.4"})),
        ]

        outcomes = router.run(items)

        assert [type(o) for o in outcomes] == [Routed, Dropped, Rejected,
                                               Dropped, Routed]
        assert outcomes[0].key == fake_resolver("a.example.com")
        assert outcomes[1].reason == RESOLUTION_FAILED
        assert outcomes[3].reason == INVALID_URL
        assert outcomes[4].key == "1.2.3.4"

    def test_run_many_concurrently(self):
        router = self.build_router(mode=PartitionMode.IP, max_workers=16)
        items = [CrawlItem(f"http://host{i % 20}.example.com/page{i}")
                 for i in range(500)]

        outcomes = router.run(items)

        assert all(isinstance(o, Routed) for o in outcomes)
        counter = router.partitioner.counter
        assert counter.get("resolved") + counter.get("from cache") == 500
        assert len(router.partitioner.cache) == 20

    def test_run_timed_package(self):
        router = self.build_router({"key": "val"}, mode=PartitionMode.DOMAIN)
        items = [
            CrawlItem("http://www.example.com/", Metadata({"key": "val"})),
            CrawlItem("http://www.example.com/a"),
            CrawlItem("http://blog.example.com/b"),
            CrawlItem("http://www.example.org/"),
            CrawlItem("http://"),
        ]

        outcomes, package, message = router.run_timed(items)

        assert len(outcomes) == 5
        assert package.partition_sizes() == {"example.com": 2, "example.org": 1}
        assert package.get_urls("example.com") == ["http://www.example.com/a",
                                                   "http://blog.example.com/b"]
        assert package.total_routed == 3
        assert package.total_rejected == 1
        assert package.total_dropped == 1
        assert package.dropped == {INVALID_URL: ["http://"]}
        assert message.startswith("3 URLs were routed to 2 partitions")

    def test_max_workers_bounds(self):
        assert Router(max_workers=0)._max_workers == 1
        assert Router(max_workers=1000)._max_workers == 128
        assert Router()._max_workers == 8
