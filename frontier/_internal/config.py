import json

from .resolver_cache import DEFAULT_CAPACITY
from .utils import file_exists, between

class Config:
    items_file_key = 'items_file'
    filters_file_key = 'filters_file'
    partition_mode_key = 'partition_mode'
    cache_size_key = 'cache_size'
    workers_key = 'workers'
    output_file_key = 'output_file'
    debug_key = 'debug'

    default_output_file = "routed.jsonl"

    min_cache_size = 1
    max_cache_size = 1_000_000
    min_workers = 1
    max_workers = 128

    def __init__(self, items_file="", filters_file="", partition_mode="byHost",
                 cache_size=DEFAULT_CAPACITY, workers=8,
                 output_file=default_output_file, debug=False):
        self.items_file = items_file
        self.filters_file = filters_file
        self.partition_mode = partition_mode
        self.cache_size = cache_size
        self.workers = workers
        self.output_file = output_file
        self.debug = debug

    def to_json(self):
        def json_mapping(key, val):
            return f'"{key}": {json.dumps(val)}'

        return (
            '{\n' +
            json_mapping(self.items_file_key, self.items_file) + ',\n' +
            json_mapping(self.filters_file_key, self.filters_file) + ',\n' +
            json_mapping(self.partition_mode_key, self.partition_mode) + ',\n' +
            json_mapping(self.cache_size_key, self.cache_size) + ',\n' +
            json_mapping(self.workers_key, self.workers) + ',\n' +
            json_mapping(self.output_file_key, self.output_file) + ',\n' +
            json_mapping(self.debug_key, self.debug) +
            '\n}'
        )

def _flag_value(args, arg_idx):
    if arg_idx + 1 >= len(args):
        raise ValueError(f"missing value for option {args[arg_idx]}")
    return args[arg_idx + 1]

def _bounded_int(value, name, low, high):
    n = int(value)
    if not between(n, low, high):
        raise ValueError(f"{name} must be between {low} and {high}.")
    return n

# Flags followed by a value. The value is consumed and never read as a flag.
_value_flags = ('-i', '-f', '-m', '-c', '-w', '-o')

def parse_config(args):
    options = {}
    arg_idx = 0
    while arg_idx < len(args):
        if '-i' == args[arg_idx]:
            fpath = _flag_value(args, arg_idx)
            if not file_exists(fpath):
                raise FileNotFoundError(fpath)
            options[Config.items_file_key] = fpath

        elif '-f' == args[arg_idx]:
            fpath = _flag_value(args, arg_idx)
            if not file_exists(fpath):
                raise FileNotFoundError(fpath)
            options[Config.filters_file_key] = fpath

        elif '-m' == args[arg_idx]:
            # Unknown modes are not an error here: the partitioner falls back
            # to partitioning by host.
            options[Config.partition_mode_key] = _flag_value(args, arg_idx)

        elif '-c' == args[arg_idx]:
            options[Config.cache_size_key] = _bounded_int(
                _flag_value(args, arg_idx), "cache size",
                Config.min_cache_size, Config.max_cache_size)

        elif '-w' == args[arg_idx]:
            options[Config.workers_key] = _bounded_int(
                _flag_value(args, arg_idx), "number of workers",
                Config.min_workers, Config.max_workers)

        elif '-o' == args[arg_idx]:
            options[Config.output_file_key] = _flag_value(args, arg_idx)

        elif '-d' == args[arg_idx]:
            options[Config.debug_key] = True

        arg_idx += 2 if args[arg_idx] in _value_flags else 1

    return Config(**options)
