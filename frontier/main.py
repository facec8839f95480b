import json
import sys

from ._internal.config import parse_config
from ._internal.crawl_item import load_items
from ._internal.crawl_item import Routed
from ._internal.metadata_filter import MetadataFilter
from ._internal.partitioner import URLPartitioner
from ._internal.resolver_cache import ResolverCache
from ._internal.router import Router
from ._internal.utils import run_result, STATUS_SUCCESS, STATUS_FAILED
from ._internal import log

logger = log.logger()

def write_routed(fpath, outcomes):
    with open(fpath, "w") as f:
        for outcome in outcomes:
            if not isinstance(outcome, Routed):
                continue
            f.write(json.dumps({
                "url": outcome.url,
                "key": outcome.key,
                "metadata": outcome.metadata.as_dict(),
            }) + "\n")

def main(args=None):
    if args is None:
        args = sys.argv[1:]

    try:
        logger.info("Parsing config.")

        cfg = parse_config(args)
        log.set_debug(cfg.debug)

        logger.info(
            "Successfully parsed config. Config in json format:\n" + cfg.to_json()
        )

        logger.info("Initializing router.")

        if cfg.filters_file != "":
            url_filter = MetadataFilter.from_file(cfg.filters_file)
        else:
            url_filter = MetadataFilter()
        partitioner = URLPartitioner(mode=cfg.partition_mode,
                                     cache=ResolverCache(cfg.cache_size))
        router = Router(url_filter, partitioner, max_workers=cfg.workers)

        items = load_items(cfg.items_file) if cfg.items_file != "" else []
        logger.info(f"Successfully initialized router. Got {len(items)} items.")

        logger.info("Starting routing run.")

        outcomes, _, success_message = router.run_timed(items)
        write_routed(cfg.output_file, outcomes)

        logger.info(f"Routing ran successfully. Output in '{cfg.output_file}'.")

        return run_result(status=STATUS_SUCCESS, reason=success_message)

    except Exception as e:
        logger.critical(e, exc_info=True)

        return run_result(status=STATUS_FAILED, reason=f"Routing run failed: {e}")

def run():
    result = main()
    print(json.dumps(result))
    sys.exit(0 if result['Status'] == STATUS_SUCCESS else 1)
