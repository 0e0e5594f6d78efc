"""Observable storage for the access/refresh token pair.

The store is the only owner of the persisted token pair. Everything else
reads it through :meth:`TokenStore.current`, a synchronous listener
registered with :meth:`TokenStore.subscribe`, or the async
:meth:`TokenStore.observe` stream.

Persistence is delegated to a :class:`TokenBackend`. The store writes the
backend first and only then updates memory and notifies listeners, so a
storage failure leaves the previous pair in place.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
import tempfile
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from pyvehicle._constants import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, TOKEN_NAMESPACE
from pyvehicle.exceptions import StorageError
from pyvehicle.models.token import TokenPair

_logger = logging.getLogger(__name__)

TokenListener = Callable[[TokenPair | None], None]


def _pair_from_record(record: dict[str, Any] | None) -> TokenPair | None:
    """Turn a persisted record into a pair; partial records count as absent."""
    if not record:
        return None
    try:
        return TokenPair.model_validate(
            {
                ACCESS_TOKEN_KEY: record.get(ACCESS_TOKEN_KEY),
                REFRESH_TOKEN_KEY: record.get(REFRESH_TOKEN_KEY),
            }
        )
    except ValidationError:
        _logger.debug("Ignoring incomplete persisted token record")
        return None


def _record_from_pair(pair: TokenPair) -> dict[str, str]:
    return {ACCESS_TOKEN_KEY: pair.access_token, REFRESH_TOKEN_KEY: pair.refresh_token}


class TokenBackend(Protocol):
    """Persistence medium for a single token record."""

    async def read(self) -> dict[str, Any] | None: ...

    async def write(self, record: dict[str, str]) -> None: ...

    async def delete(self) -> None: ...


class MemoryTokenBackend:
    """Process-local backend; tokens vanish when the process exits."""

    def __init__(self, record: dict[str, str] | None = None) -> None:
        self._record = dict(record) if record else None

    async def read(self) -> dict[str, Any] | None:
        return dict(self._record) if self._record else None

    async def write(self, record: dict[str, str]) -> None:
        self._record = dict(record)

    async def delete(self) -> None:
        self._record = None


class JsonFileTokenBackend:
    """Backend keeping the record under one namespace of a JSON file.

    Layout::

        {"auth_prefs": {"access_token": "...", "refresh_token": "..."}}

    Other namespaces in the same file are left untouched. Writes go to a
    temporary file that replaces the original, so readers never observe a
    half-written record.
    """

    def __init__(self, path: str | os.PathLike[str], namespace: str = TOKEN_NAMESPACE) -> None:
        self._path = Path(path)
        self._namespace = namespace

    def _load_document(self) -> dict[str, Any]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise StorageError(f"Cannot read token file {self._path}: {exc}") from exc
        if not text.strip():
            return {}
        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StorageError(f"Token file {self._path} is not valid JSON") from exc
        if not isinstance(document, dict):
            raise StorageError(f"Token file {self._path} does not hold a JSON object")
        return document

    def _dump_document(self, document: dict[str, Any]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=self._path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(document, handle, indent=2, sort_keys=True)
                os.replace(tmp_name, self._path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise StorageError(f"Cannot write token file {self._path}: {exc}") from exc

    def _read_sync(self) -> dict[str, Any] | None:
        record = self._load_document().get(self._namespace)
        return record if isinstance(record, dict) else None

    def _write_sync(self, record: dict[str, str]) -> None:
        document = self._load_document()
        document[self._namespace] = dict(record)
        self._dump_document(document)

    def _delete_sync(self) -> None:
        document = self._load_document()
        if self._namespace not in document:
            return
        del document[self._namespace]
        self._dump_document(document)

    async def read(self) -> dict[str, Any] | None:
        return await asyncio.to_thread(self._read_sync)

    async def write(self, record: dict[str, str]) -> None:
        await asyncio.to_thread(self._write_sync, record)

    async def delete(self) -> None:
        await asyncio.to_thread(self._delete_sync)


@dataclass(slots=True)
class _LatestValue:
    """Single-slot mailbox backing :meth:`TokenStore.observe`."""

    value: TokenPair | None = None
    changed: asyncio.Event = field(default_factory=asyncio.Event)

    def push(self, value: TokenPair | None) -> None:
        self.value = value
        self.changed.set()


class TokenStore:
    """Observable holder of the current :class:`TokenPair`.

    Usage::

        store = TokenStore(JsonFileTokenBackend("tokens.json"))
        await store.load()
        unsubscribe = store.subscribe(print)
    """

    def __init__(self, backend: TokenBackend | None = None) -> None:
        self._backend: TokenBackend = backend if backend is not None else MemoryTokenBackend()
        self._current: TokenPair | None = None
        self._listeners: list[TokenListener] = []
        self._lock = asyncio.Lock()

    @property
    def current(self) -> TokenPair | None:
        """Latest token pair, or ``None`` when there is no session."""
        return self._current

    def current_access_token(self) -> str | None:
        pair = self._current
        return pair.access_token if pair is not None else None

    async def load(self) -> TokenPair | None:
        """Read the persisted pair into memory and notify on change.

        Raises
        ------
        StorageError
            If the backend cannot be read.
        """
        async with self._lock:
            try:
                record = await self._backend.read()
            except StorageError:
                raise
            except Exception as exc:
                raise StorageError(f"Cannot read tokens: {exc}") from exc
            self._set(_pair_from_record(record))
            return self._current

    async def save(self, pair: TokenPair) -> None:
        """Persist *pair* and make it current.

        Raises
        ------
        StorageError
            If the backend write fails; the previous pair stays current.
        """
        async with self._lock:
            try:
                await self._backend.write(_record_from_pair(pair))
            except StorageError:
                raise
            except Exception as exc:
                raise StorageError(f"Cannot save tokens: {exc}") from exc
            _logger.debug("Token pair saved")
            self._set(pair)

    async def clear(self) -> None:
        """Remove the persisted pair.

        Raises
        ------
        StorageError
            If the backend delete fails; the previous pair stays current.
        """
        async with self._lock:
            try:
                await self._backend.delete()
            except StorageError:
                raise
            except Exception as exc:
                raise StorageError(f"Cannot clear tokens: {exc}") from exc
            _logger.debug("Token pair cleared")
            self._set(None)

    def subscribe(self, listener: TokenListener) -> Callable[[], None]:
        """Register *listener* and return a function that removes it.

        The listener is called immediately with the current value, then
        once per change, in order.
        """
        self._listeners.append(listener)
        self._notify_one(listener, self._current)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _unsubscribe

    async def observe(self) -> AsyncIterator[TokenPair | None]:
        """Yield the current value, then each change.

        Only the newest value is buffered: a consumer that falls behind
        skips intermediate values but always sees the latest one.
        """
        mailbox = _LatestValue()
        unsubscribe = self.subscribe(mailbox.push)
        try:
            while True:
                await mailbox.changed.wait()
                mailbox.changed.clear()
                yield mailbox.value
        finally:
            unsubscribe()

    def _set(self, pair: TokenPair | None) -> None:
        if pair == self._current:
            return
        self._current = pair
        for listener in list(self._listeners):
            self._notify_one(listener, pair)

    @staticmethod
    def _notify_one(listener: TokenListener, pair: TokenPair | None) -> None:
        try:
            listener(pair)
        except Exception:
            _logger.debug("Token listener failed", exc_info=True)
