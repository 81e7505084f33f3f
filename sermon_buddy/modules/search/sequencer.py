"""Thread-safe latest-token registry so only the newest search per caller is answered."""
import itertools
import threading
import logging
from typing import Optional
from collections import OrderedDict

logger = logging.getLogger(__name__)

DEFAULT_MAX_KEYS = 10_000


class SearchSequencer:
    def __init__(self, max_keys: int = DEFAULT_MAX_KEYS):
        self._lock = threading.Lock()
        self._counter = itertools.count(1)
        self._latest: "OrderedDict[str, int]" = OrderedDict()
        self._max_keys = max_keys

    def issue(self, key: str) -> int:
        """Hand out a new token for key; it supersedes every earlier token for that key."""
        with self._lock:
            token = next(self._counter)
            self._latest[key] = token
            self._latest.move_to_end(key)
            while len(self._latest) > self._max_keys:
                evicted, _ = self._latest.popitem(last=False)
                logger.debug(f"Evicted search sequence for {evicted}")
            return token

    def is_latest(self, key: str, token: int) -> bool:
        with self._lock:
            return self._latest.get(key) == token

    def latest(self, key: str) -> Optional[int]:
        with self._lock:
            return self._latest.get(key)


search_sequencer = SearchSequencer()
