# Metadata is the multi-valued mapping attached to every URL flowing through
# the frontier. Keys are case sensitive and each key maps to an ordered list
# of string values. Duplicates are allowed and insertion order is kept.
#
# A Metadata object must not be mutated while it is being filtered or
# partitioned.
class Metadata:
    def __init__(self, values=None):
        self._md = {}
        if values:
            for key, val in values.items():
                if isinstance(val, (list, tuple)):
                    self.add_values(key, val)
                else:
                    self.add_value(key, val)

    # get_values returns a copy of the values stored under key, or None if
    # there are none. Never raises for an unknown key.
    def get_values(self, key):
        values = self._md.get(key)
        if not values:
            return None
        return list(values)

    def get_first_value(self, key):
        values = self._md.get(key)
        if not values:
            return None
        return values[0]

    # None is not a value: a JSON null in an items file adds nothing.
    def add_value(self, key, value):
        if value is None:
            return
        self._md.setdefault(key, []).append(str(value))

    def add_values(self, key, values):
        for value in values:
            self.add_value(key, value)

    def set_value(self, key, value):
        self._md[key] = [str(value)]

    def remove(self, key):
        return self._md.pop(key, None)

    def as_dict(self):
        return {key: list(values) for key, values in self._md.items()}

    def is_empty(self):
        return len(self._md) == 0

    def __len__(self):
        return len(self._md)

    def __contains__(self, key):
        return key in self._md

    def __eq__(self, other):
        if not isinstance(other, Metadata):
            return NotImplemented
        return self._md == other._md

    def __repr__(self):
        return f"Metadata({self._md})"
