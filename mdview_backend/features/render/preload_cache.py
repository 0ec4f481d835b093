"""
PreloadCache: directory-scoped asset prefetcher used while embedding assets.

The first reference to an asset in a directory schedules background reads for
every embeddable file in that directory. Callers never wait for the prefetch:
they try the cache and fall back to a direct read (which is stored too).
"""
from __future__ import annotations

import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor

from ...config import PRELOAD_MAX_WORKERS
from ...shared import get_logger, mime_type_for

logger = get_logger(__name__)


def _cache_key(path: str) -> str:
    return os.path.normcase(os.path.abspath(path))


class PreloadCache:
    """
    Thread-safe map of absolute path -> bytes plus per-directory prefetch handles.

    A directory handle is a `Future` that resolves to the number of files read.
    Handles are created by an atomic get-or-start, so overlapping requests for
    the same directory share one background pass.
    """

    def __init__(self, max_workers: int = PRELOAD_MAX_WORKERS) -> None:
        self._lock = threading.Lock()
        self._data: dict[str, bytes] = {}
        self._dirs: dict[str, Future] = {}
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, int(max_workers or 1)), thread_name_prefix="mdview-preload"
        )
        self._closed = False

    # ------------------------------------------------------------------
    # Data access
    # ------------------------------------------------------------------

    def get(self, path: str) -> bytes | None:
        with self._lock:
            return self._data.get(_cache_key(path))

    def put(self, path: str, data: bytes) -> None:
        with self._lock:
            self._data[_cache_key(path)] = data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    # ------------------------------------------------------------------
    # Prefetch
    # ------------------------------------------------------------------

    def prefetch_directory(self, directory: str) -> Future:
        """
        Start (or join) the background read of every embeddable file in `directory`.

        Returns:
            The directory's completion handle. Already-complete and in-flight
            directories return their existing handle without new reads.
        """
        key = _cache_key(directory)
        with self._lock:
            existing = self._dirs.get(key)
            if existing is not None:
                return existing
            handle: Future = Future()
            handle.set_running_or_notify_cancel()
            self._dirs[key] = handle
            if self._closed:
                handle.set_result(0)
                return handle
        try:
            self._executor.submit(self._list_and_schedule, directory, handle)
        except RuntimeError:
            # Executor already shut down; nothing will be prefetched.
            handle.set_result(0)
        return handle

    def _list_and_schedule(self, directory: str, handle: Future) -> None:
        """Runs on the executor: list the directory and fan out one read per file."""
        try:
            with os.scandir(directory) as it:
                paths = [
                    entry.path
                    for entry in it
                    if mime_type_for(entry.name, "image") and self._is_file(entry)
                ]
        except OSError:
            logger.debug("Preload listing failed for %s", directory, exc_info=True)
            handle.set_result(0)
            return

        if not paths:
            handle.set_result(0)
            return

        remaining = len(paths)
        loaded = 0
        counter_lock = threading.Lock()

        def _done(ok: bool) -> None:
            nonlocal remaining, loaded
            with counter_lock:
                remaining -= 1
                if ok:
                    loaded += 1
                finished = remaining == 0
            if finished:
                handle.set_result(loaded)

        for path in paths:
            try:
                self._executor.submit(self._read_one, path, _done)
            except RuntimeError:
                _done(False)

    def _read_one(self, path: str, done) -> None:
        ok = False
        try:
            with open(path, "rb") as fh:
                data = fh.read()
            key = _cache_key(path)
            with self._lock:
                # A direct read may have landed first; both hold the same bytes.
                self._data.setdefault(key, data)
            ok = True
        except OSError:
            logger.debug("Preload read failed for %s", path, exc_info=True)
        finally:
            done(ok)

    @staticmethod
    def _is_file(entry: os.DirEntry) -> bool:
        try:
            return entry.is_file(follow_symlinks=True)
        except OSError:
            return False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def is_directory_complete(self, directory: str) -> bool:
        with self._lock:
            handle = self._dirs.get(_cache_key(directory))
        return bool(handle is not None and handle.done())

    def close(self) -> None:
        """Stop accepting new directories; reads already queued still finish."""
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=False)

    def __enter__(self) -> "PreloadCache":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
