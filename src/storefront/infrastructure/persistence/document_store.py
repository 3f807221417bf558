"""JSON document store: the datastore client shared by all repositories.

Holds named collections of JSON-compatible documents in memory and, when
given a path, mirrors them to a single file.  The entry point owns the
lifecycle (``connect()`` / ``disconnect()``); repositories receive the
connected instance.

Transactions are serializable across threads and processes.  The
outermost transaction takes the in-process lock and, for a file-backed
store, an exclusive lock on the ``<file>.lock`` sidecar; it then reloads
the collections from disk, so it always starts from what other clients
committed.  Any exception restores the state seen on entry; a clean exit
that changed something writes the file (temp file + atomic rename) before
the file lock is released.
"""

from __future__ import annotations

import copy
import json
import os
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import structlog
from filelock import FileLock, Timeout

from storefront.domain.exceptions import TransactionAbortError
from storefront.domain.repository.transaction_manager import TransactionManager

logger = structlog.get_logger(__name__)

COLLECTIONS = ("inventory", "orders")


class StoreNotConnectedError(RuntimeError):
    """The store was used before ``connect()`` or after ``disconnect()``."""


class JsonDocumentStore(TransactionManager):

    def __init__(
        self,
        file_path: Path | None = None,
        lock_timeout: float = 5.0,
        max_attempts: int = 3,
        backoff_base: float = 0.05,
    ) -> None:
        self._file_path = file_path
        self._lock_timeout = lock_timeout
        self.max_attempts = max_attempts
        self.backoff_base = backoff_base
        self._lock = threading.RLock()
        self._local = threading.local()
        self._file_lock = (
            FileLock(str(file_path) + ".lock") if file_path is not None else None
        )
        self._data: dict[str, dict[str, Any]] | None = None

    # --- Lifecycle -------------------------------------------------------------

    def connect(self) -> JsonDocumentStore:
        with self._lock:
            if self._data is not None:
                return self
            if self._file_path is not None:
                self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._data = self._load()
            logger.debug("store_connected", path=str(self._file_path or ":memory:"))
        return self

    def disconnect(self) -> None:
        with self._lock:
            self._data = None
        logger.debug("store_disconnected", path=str(self._file_path or ":memory:"))

    @property
    def connected(self) -> bool:
        return self._data is not None

    # --- TransactionManager interface -----------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if not self._lock.acquire(timeout=self._lock_timeout):
            raise TransactionAbortError(
                f"Timed out after {self._lock_timeout}s waiting for the datastore lock"
            )
        try:
            depth = getattr(self._local, "depth", 0)
            if depth:
                # Nested: join the enclosing transaction.
                self._local.depth = depth + 1
                try:
                    yield
                finally:
                    self._local.depth = depth
                return

            self._require_connected()
            with self._locked_file():
                if self._file_path is not None:
                    self._data = self._load()
                snapshot = copy.deepcopy(self._data)
                self._local.depth = 1
                try:
                    yield
                    if self._data != snapshot:
                        self._flush()
                except BaseException:
                    self._data = snapshot
                    raise
                finally:
                    self._local.depth = 0
        finally:
            self._lock.release()

    @contextmanager
    def _locked_file(self) -> Iterator[None]:
        if self._file_lock is None:
            yield
            return
        try:
            self._file_lock.acquire(timeout=self._lock_timeout)
        except Timeout:
            raise TransactionAbortError(
                f"Timed out after {self._lock_timeout}s waiting for {self._file_lock.lock_file}"
            ) from None
        try:
            yield
        finally:
            self._file_lock.release()

    # --- Document access (used by repositories) --------------------------------

    def get(self, collection: str, key: str) -> dict[str, Any] | None:
        with self.transaction():
            doc = self._collection(collection).get(key)
            return copy.deepcopy(doc) if doc is not None else None

    def find(self, collection: str) -> list[dict[str, Any]]:
        with self.transaction():
            return [copy.deepcopy(doc) for doc in self._collection(collection).values()]

    def put(self, collection: str, key: str, document: dict[str, Any]) -> None:
        with self.transaction():
            self._collection(collection)[key] = copy.deepcopy(document)

    def remove(self, collection: str, key: str) -> None:
        with self.transaction():
            self._collection(collection).pop(key, None)

    def keys(self, collection: str) -> list[str]:
        with self.transaction():
            return list(self._collection(collection))

    # --- Internal helpers -----------------------------------------------------

    def _require_connected(self) -> dict[str, dict[str, Any]]:
        if self._data is None:
            raise StoreNotConnectedError("Datastore is not connected")
        return self._data

    def _collection(self, name: str) -> dict[str, Any]:
        if name not in COLLECTIONS:
            raise KeyError(f"Unknown collection: {name!r}")
        return self._require_connected()[name]

    def _load(self) -> dict[str, dict[str, Any]]:
        data: dict[str, dict[str, Any]] = {name: {} for name in COLLECTIONS}
        if self._file_path is not None and self._file_path.exists():
            raw = json.loads(self._file_path.read_text(encoding="utf-8"))
            for name in COLLECTIONS:
                data[name] = raw.get(name, {})
        return data

    def _flush(self) -> None:
        if self._file_path is None:
            return
        payload = json.dumps(self._require_connected(), indent=2) + "\n"
        tmp_name: str | None = None
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._file_path.parent, prefix=f".{self._file_path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, self._file_path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise TransactionAbortError(f"Could not write datastore: {exc}") from exc
