from collections import Counter
from threading import Lock

# EventCounter counts named events ("scopes") for one component. It is shared
# by all worker threads, so every access goes through _lock.
class EventCounter:
    def __init__(self, name):
        self.name = name
        self._counts = Counter()
        self._lock = Lock()

    def incr(self, scope, by=1):
        with self._lock:
            self._counts[scope] += by

    def get(self, scope):
        with self._lock:
            return self._counts[scope]

    def snapshot(self):
        with self._lock:
            return dict(self._counts)

    def __repr__(self):
        return f"EventCounter({self.name}, {self.snapshot()})"
