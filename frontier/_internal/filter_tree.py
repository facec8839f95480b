from enum import Enum

# The filter tree describes conditions that DISQUALIFY a URL: an item whose
# metadata makes the tree evaluate to True is rejected.
#
# Nodes are immutable once built and can be shared by any number of threads.

class FilterConfigError(ValueError):
    pass

class FilterOperation(Enum):
    OR = "OR"
    AND = "AND"

    # parse accepts 'and'/'or' in any case.
    @classmethod
    def parse(cls, value):
        if isinstance(value, FilterOperation):
            return value
        if isinstance(value, str):
            normalized = value.strip().upper()
            for operation in cls:
                if operation.value == normalized:
                    return operation
        raise FilterConfigError(f"Unknown filter operation: {value!r}")

# Leaf matches when any value stored under key equals value, ignoring case.
class Leaf:
    __slots__ = ('key', 'value', '_folded')

    def __init__(self, key, value):
        if not isinstance(key, str) or not isinstance(value, str):
            raise FilterConfigError(f"Leaf key and value must be strings: {key!r}={value!r}")
        object.__setattr__(self, 'key', key)
        object.__setattr__(self, 'value', value)
        object.__setattr__(self, '_folded', value.lower())

    def __setattr__(self, name, value):
        raise AttributeError("Leaf is immutable")

    def evaluate(self, metadata):
        if metadata is None:
            return False
        values = metadata.get_values(self.key)
        if not values:
            return False
        for v in values:
            if v.lower() == self._folded:
                return True
        return False

    def __eq__(self, other):
        if not isinstance(other, Leaf):
            return NotImplemented
        return self.key == other.key and self.value == other.value

    def __hash__(self):
        return hash((Leaf, self.key, self.value))

    def __repr__(self):
        return f"Leaf({self.key!r}={self.value!r})"

# Branch combines its children with AND or OR. Over zero children AND is True
# and OR is False, as all() and any() give.
class Branch:
    __slots__ = ('operation', 'children')

    def __init__(self, operation=FilterOperation.OR, children=()):
        object.__setattr__(self, 'operation', FilterOperation.parse(operation))
        object.__setattr__(self, 'children', tuple(children))
        for child in self.children:
            if not isinstance(child, (Leaf, Branch)):
                raise FilterConfigError(f"Not a filter node: {child!r}")

    def __setattr__(self, name, value):
        raise AttributeError("Branch is immutable")

    def evaluate(self, metadata):
        if self.operation is FilterOperation.AND:
            return all(child.evaluate(metadata) for child in self.children)
        return any(child.evaluate(metadata) for child in self.children)

    # Children compare as a set: order of evaluation is not part of a
    # filter's identity.
    def __eq__(self, other):
        if not isinstance(other, Branch):
            return NotImplemented
        return (self.operation == other.operation and
                frozenset(self.children) == frozenset(other.children))

    def __hash__(self):
        return hash((Branch, self.operation, frozenset(self.children)))

    def __repr__(self):
        inner = ", ".join(repr(c) for c in self.children)
        return f"Branch({self.operation.value}, [{inner}])"

# FilterTree is the top level of a configured filter. An empty tree means no
# rule was configured at all, and admits everything without evaluating.
class FilterTree:
    def __init__(self, root=None):
        if root is not None and not isinstance(root, Branch):
            raise FilterConfigError(f"Filter root must be a Branch: {root!r}")
        self.root = root

    def is_empty(self):
        return self.root is None

    def evaluate(self, metadata):
        if self.root is None:
            return False
        return self.root.evaluate(metadata)

    # admits applies the admission rule: no metadata, no fields or no rule
    # means admitted; otherwise the URL is admitted only if the tree does not
    # match.
    def admits(self, metadata):
        if metadata is None or metadata.is_empty():
            return True
        if self.is_empty():
            return True
        return not self.root.evaluate(metadata)

    def __eq__(self, other):
        if not isinstance(other, FilterTree):
            return NotImplemented
        return self.root == other.root

    def __hash__(self):
        return hash((FilterTree, self.root))

    def __repr__(self):
        return f"FilterTree({self.root!r})"

FilterTree.EMPTY = FilterTree()

def evaluate(tree, metadata):
    return tree.evaluate(metadata)
