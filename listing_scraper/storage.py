from __future__ import annotations

import json
import os
import queue
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Optional, Tuple

from .models import ScrapingResult


class ResultSink(ABC):
    """Destination for completed scraping results."""

    @abstractmethod
    def write(self, url: str, result: ScrapingResult) -> None:
        """Persist a single result."""

    @abstractmethod
    def close(self) -> None:
        """Flush pending writes and release resources."""

    def __enter__(self) -> "ResultSink":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class JsonlResultWriter(ResultSink):
    """Appends results as JSON Lines from a background writer thread.

    Each line is the result's ``to_dict()`` form plus the requested URL and
    a ``timestamp`` taken when write() was called, not when the line hit disk.
    """

    def __init__(self, path: str) -> None:
        self._path = path
        directory = os.path.dirname(os.path.abspath(path))
        os.makedirs(directory, exist_ok=True)
        self._written = 0
        self._queue: queue.Queue[Optional[Tuple[float, str, ScrapingResult]]] = queue.Queue()
        self._thread = threading.Thread(target=self._drain, name="jsonl-writer", daemon=True)
        self._thread.start()

    @property
    def path(self) -> str:
        return self._path

    @property
    def written(self) -> int:
        """Lines flushed so far."""
        return self._written

    def write(self, url: str, result: ScrapingResult) -> None:
        self._queue.put((time.time(), url, result))

    def close(self) -> None:
        self._queue.put(None)
        self._thread.join(timeout=5)

    def _drain(self) -> None:
        with open(self._path, "a", encoding="utf-8") as out:
            while True:
                entry = self._queue.get()
                if entry is None:
                    return
                timestamp, url, result = entry
                line = json.dumps({"timestamp": timestamp, "url": url, **result.to_dict()}, ensure_ascii=False)
                out.write(line + "\n")
                out.flush()
                self._written += 1
