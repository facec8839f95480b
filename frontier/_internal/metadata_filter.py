import json

from . import log
from .filter_tree import Branch
from .filter_tree import FilterConfigError
from .filter_tree import FilterOperation
from .filter_tree import FilterTree
from .filter_tree import Leaf

logger = log.logger()

# Filter out URLs based on metadata in the source document. Accepted params:
#
# Legacy form, an implicit OR over literal fields:
#
#   {"key": "val"}
#
# Structured form:
#
#   {
#     "operation": "AND",
#     "filters": {
#       "key": "val",
#       "unique_key_for_complex_filtering_1": {
#         "operation": "OR",
#         "filters": {"key2": "val2", "key3": "val3"}
#       }
#     }
#   }
#
# i.e. key=val AND (key2=val2 OR key3=val3). Keys starting with
# COMPLEX_FILTERING_KEY_PREFIX hold a nested filter object.

COMPLEX_FILTERING_KEY_PREFIX = "unique_key_for_complex_filtering_"
OPERATION_KEY = "operation"
FILTERS_KEY = "filters"
URL_FILTERS_KEY = "urlFilters"
FILTER_NAME = "MetadataFilter"

def is_nested_key(key):
    return key.startswith(COMPLEX_FILTERING_KEY_PREFIX)

# _as_text turns a scalar JSON value into the string a leaf compares against.
def _as_text(key, value):
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    raise FilterConfigError(
        f"Filter value for '{key}' must be a string or a number, "+
        f"got: {value!r}")

# build_branch turns one params object into a Branch, recursing into nested
# filter objects.
def build_branch(params):
    if not isinstance(params, dict):
        raise FilterConfigError(f"Filter params must be an object, got: {params!r}")

    if OPERATION_KEY not in params and FILTERS_KEY not in params:
        return Branch(FilterOperation.OR,
                      [Leaf(key, _as_text(key, value))
                       for key, value in params.items()])

    for key in params:
        if key not in (OPERATION_KEY, FILTERS_KEY):
            logger.warning(f"Ignoring unknown filter parameter '{key}'")

    operation = FilterOperation.parse(params.get(OPERATION_KEY, "OR"))
    filters = params.get(FILTERS_KEY, {})
    if not isinstance(filters, dict):
        raise FilterConfigError(f"'{FILTERS_KEY}' must be an object, got: {filters!r}")

    children = []
    for key, value in filters.items():
        if is_nested_key(key):
            children.append(build_branch(value))
        else:
            children.append(Leaf(key, _as_text(key, value)))
    return Branch(operation, children)

# build returns the FilterTree for the given params. No params, or params
# with no entries at the top level, give the empty tree.
def build(params):
    if params is None:
        return FilterTree.EMPTY
    root = build_branch(params)
    if len(root.children) == 0:
        return FilterTree.EMPTY
    return FilterTree(root)

# to_params is the inverse of build_branch. Nested branches are stored under
# the reserved prefix with the lowest counter not used yet in that mapping.
def to_params(branch):
    filters = {}
    for child in branch.children:
        if isinstance(child, Branch):
            _add_nested(filters, to_params(child))
            continue
        if is_nested_key(child.key):
            raise FilterConfigError(
                f"Field name '{child.key}' collides with the reserved prefix "+
                f"'{COMPLEX_FILTERING_KEY_PREFIX}'")
        if child.key in filters:
            # Same field twice in one mapping: wrap the repeat in a single
            # leaf branch with the same operation.
            _add_nested(filters, {
                OPERATION_KEY: branch.operation.value,
                FILTERS_KEY: {child.key: child.value},
            })
            continue
        filters[child.key] = child.value
    return {OPERATION_KEY: branch.operation.value, FILTERS_KEY: filters}

def _add_nested(filters, params):
    counter = 1
    while COMPLEX_FILTERING_KEY_PREFIX + str(counter) in filters:
        counter += 1
    filters[COMPLEX_FILTERING_KEY_PREFIX + str(counter)] = params

# find_filter_params extracts the MetadataFilter params from a loaded filter
# configuration. The configuration is either the params themselves or a URL
# filters file listing several filters.
def find_filter_params(conf):
    if not isinstance(conf, dict):
        raise FilterConfigError(f"Filter configuration must be an object, got: {conf!r}")
    if URL_FILTERS_KEY not in conf:
        return conf

    url_filters = conf[URL_FILTERS_KEY]
    if not isinstance(url_filters, list):
        raise FilterConfigError(f"'{URL_FILTERS_KEY}' must be a list")
    for entry in url_filters:
        if not isinstance(entry, dict):
            raise FilterConfigError(f"URL filter entry must be an object, got: {entry!r}")
        if (entry.get("name") == FILTER_NAME or
            str(entry.get("class", "")).endswith("." + FILTER_NAME)
        ):
            return entry.get("params", {})

    logger.warning(f"No {FILTER_NAME} entry in '{URL_FILTERS_KEY}'. "+
                   f"All URLs will be admitted.")
    return None

def load_filter_params(fpath):
    with open(fpath, "r") as f:
        try:
            conf = json.load(f)
        except json.JSONDecodeError as e:
            raise FilterConfigError(f"Invalid JSON in filter file '{fpath}': {e}") from e
    return find_filter_params(conf)

class MetadataFilter:
    def __init__(self, tree=None):
        if tree is None:
            tree = FilterTree.EMPTY
        self._operation = FilterOperation.OR
        self._children = []
        if not tree.is_empty():
            self._operation = tree.root.operation
            self._children = list(tree.root.children)
        self.tree = tree

    @classmethod
    def from_params(cls, params):
        return cls(build(params))

    @classmethod
    def from_file(cls, fpath):
        metadata_filter = cls.from_params(load_filter_params(fpath))
        logger.info(f"Loaded metadata filter from '{fpath}': {metadata_filter.tree}")
        return metadata_filter

    # add_filter, add_branch and set_operation are for building a filter in
    # code. They must not be called once the filter is shared between threads.
    def add_filter(self, key, value):
        self._children.append(Leaf(key, value))
        self._rebuild()

    def add_branch(self, branch):
        if not isinstance(branch, Branch):
            raise FilterConfigError(f"Not a Branch: {branch!r}")
        self._children.append(branch)
        self._rebuild()

    def set_operation(self, operation):
        self._operation = FilterOperation.parse(operation)
        self._rebuild()

    def _rebuild(self):
        if len(self._children) == 0:
            self.tree = FilterTree.EMPTY
        else:
            self.tree = FilterTree(Branch(self._operation, self._children))

    # filter returns url unchanged if it is admitted, None if it is rejected.
    def filter(self, url, metadata):
        if self.tree.admits(metadata):
            return url
        logger.debug(f"Filtering {url} matching metadata filter {self.tree.root}")
        return None

    def to_params(self):
        if self.tree.is_empty():
            return {OPERATION_KEY: self._operation.value, FILTERS_KEY: {}}
        return to_params(self.tree.root)

    def __eq__(self, other):
        if not isinstance(other, MetadataFilter):
            return NotImplemented
        return self.tree == other.tree

    def __hash__(self):
        return hash(self.tree)

    def __repr__(self):
        return f"MetadataFilter(filters={self.tree.root})"
