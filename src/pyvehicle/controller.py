"""Application controller: intents in, state snapshots out.

The controller owns the single :class:`~pyvehicle.state.ApplicationState`
and is the only place that talks to the session repository on behalf of
the presentation layer.

Intents are queued and dispatched one at a time in arrival order. Local
intents (toggle, query edit, dismiss) are reduced on the spot; intents
that need the network start a tracked task so a slow request never holds
up the queue. Every state change goes through
:meth:`~pyvehicle.state.StateHolder.update`, which replaces the snapshot
in one step.

Each task remembers the session it was started in. Losing the tokens ends
the session, and results from tasks of an ended session are dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from pyvehicle._constants import (
    AUTH_FAILED_MESSAGE,
    DEFAULT_RECENT_LIMIT,
    DETAIL_FAILED_MESSAGE,
    EMPTY_QUERY_MESSAGE,
    LOAD_FAILED_MESSAGE,
    MISSING_CREDENTIALS_MESSAGE,
    SEARCH_FAILED_MESSAGE,
)
from pyvehicle.credentials import CredentialSource
from pyvehicle.exceptions import NoSessionError, NotFoundError, VehicleError
from pyvehicle.models.token import TokenPair
from pyvehicle.repository import SessionRepository
from pyvehicle.state import reducers
from pyvehicle.state.intents import (
    ClearDetailError,
    DismissDetail,
    Intent,
    LoadRecentVehicles,
    OpenDetail,
    SearchQueryChanged,
    SubmitSearch,
    ToggleSearchVisibility,
    TokensChanged,
)
from pyvehicle.state.store import ApplicationState, StateHolder, StateListener

_logger = logging.getLogger(__name__)


def _message(exc: BaseException, fallback: str) -> str:
    text = str(exc).strip()
    return text or fallback


class ApplicationController:
    """Reduces intents and session events into :class:`ApplicationState`.

    Usage::

        async with ApplicationController(repository, credentials) as controller:
            controller.subscribe(render)
            controller.submit(SearchQueryChanged(value="k123 a45"))
            controller.submit(SubmitSearch())
    """

    def __init__(
        self,
        repository: SessionRepository,
        credentials: CredentialSource,
        *,
        recent_limit: int = DEFAULT_RECENT_LIMIT,
    ) -> None:
        self._repository = repository
        self._credentials = credentials
        self._recent_limit = recent_limit
        self._holder = StateHolder()
        self._auth_lock = asyncio.Lock()
        self._intents: asyncio.Queue[Intent] | None = None
        self._dispatcher: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._unsubscribe_tokens: Callable[[], None] | None = None
        self._initial_load_triggered = False
        self._session = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ApplicationController:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def start(self) -> None:
        """Start dispatching and begin following the token store."""
        if self._dispatcher is not None:
            return
        self._intents = asyncio.Queue()
        self._dispatcher = asyncio.create_task(self._dispatch_loop(self._intents), name="pyvehicle-intents")
        # Emits the current pair immediately, so the first queued intent
        # always reflects the session found at startup.
        self._unsubscribe_tokens = self._repository.tokens.subscribe(self._on_tokens)

    async def close(self) -> None:
        """Stop following tokens and cancel in-flight work."""
        if self._unsubscribe_tokens is not None:
            self._unsubscribe_tokens()
            self._unsubscribe_tokens = None
        pending = [task for task in self._tasks if not task.done()]
        if self._dispatcher is not None:
            pending.append(self._dispatcher)
            self._dispatcher = None
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self._tasks.clear()
        self._intents = None

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------

    @property
    def state(self) -> ApplicationState:
        """Latest snapshot (read-only)."""
        return self._holder.state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a snapshot listener; returns its unsubscribe function."""
        return self._holder.subscribe(listener)

    def submit(self, intent: Intent) -> None:
        """Queue *intent* for dispatch. Never blocks."""
        if self._intents is None:
            raise VehicleError("Controller not started. Use 'async with ApplicationController(...)'")
        self._intents.put_nowait(intent)

    async def wait_idle(self) -> None:
        """Wait until the queue is drained and no intent work is running."""
        while self._intents is not None:
            await self._intents.join()
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                if self._intents.empty():
                    return
                continue
            await asyncio.gather(*pending, return_exceptions=True)

    async def logout(self) -> None:
        """Clear the session; the token-store change drives the state."""
        await self._repository.logout()

    async def ensure_authenticated(self) -> bool:
        """Make sure a session exists, logging in at most once at a time.

        Returns ``True`` when a session is available. Failures are
        reported through ``auth_error`` and a ``False`` result.
        """
        if self._is_authenticated():
            return True
        async with self._auth_lock:
            # A caller queued behind a successful login lands here.
            if self._is_authenticated():
                return True

            credentials = self._credentials.credentials()
            if not credentials.is_complete:
                self._holder.update(lambda s: reducers.auth_failed(s, MISSING_CREDENTIALS_MESSAGE))
                return False

            self._holder.update(reducers.auth_started)
            try:
                await self._repository.login(credentials.username, credentials.password)
            except Exception as exc:
                message = _message(exc, AUTH_FAILED_MESSAGE)
                _logger.warning("Authentication failed: %s", message)
                self._holder.update(lambda s: reducers.auth_failed(s, message))
                return False

            self._holder.update(reducers.auth_succeeded)
            return True

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _is_authenticated(self) -> bool:
        return self._holder.state.is_logged_in or self._repository.tokens.current is not None

    def _on_tokens(self, pair: TokenPair | None) -> None:
        self.submit(TokensChanged(present=pair is not None))

    async def _dispatch_loop(self, queue: asyncio.Queue[Intent]) -> None:
        while True:
            intent = await queue.get()
            try:
                self._dispatch(intent)
            except Exception:
                _logger.exception("Failed to dispatch %r", intent)
            finally:
                queue.task_done()

    def _dispatch(self, intent: Intent) -> None:
        _logger.debug("Dispatching %s", type(intent).__name__)
        session = self._session
        if isinstance(intent, ToggleSearchVisibility):
            self._holder.update(reducers.toggle_search_visibility)
        elif isinstance(intent, SearchQueryChanged):
            value = intent.value
            self._holder.update(lambda s: reducers.search_query_changed(s, value))
        elif isinstance(intent, SubmitSearch):
            vin = reducers.normalize_query(self._holder.state.search_query)
            if not vin:
                self._holder.update(lambda s: reducers.list_message(s, EMPTY_QUERY_MESSAGE))
                return
            self._spawn(self._submit_search(session, vin))
        elif isinstance(intent, LoadRecentVehicles):
            self._spawn(self._load_recent_vehicles(session))
        elif isinstance(intent, OpenDetail):
            self._spawn(self._open_detail(session, intent.vehicle_id))
        elif isinstance(intent, DismissDetail):
            self._holder.update(reducers.dismiss_detail)
        elif isinstance(intent, ClearDetailError):
            self._holder.update(reducers.clear_detail_error)
        elif isinstance(intent, TokensChanged):
            self._tokens_changed(intent.present)
        else:
            raise TypeError(f"Unsupported intent: {intent!r}")

    def _tokens_changed(self, present: bool) -> None:
        if present:
            self._holder.update(reducers.logged_in)
            # Refreshes emit new pairs too; only the first one of a session loads.
            if not self._initial_load_triggered:
                self._initial_load_triggered = True
                self._spawn(self._load_recent_vehicles(self._session))
            return

        self._session += 1
        self._initial_load_triggered = False
        self._holder.update(reducers.logged_out)
        self._spawn(self._reauthenticate())

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.error("Intent task failed", exc_info=exc)

    def _apply(self, session: int, transition: Callable[[ApplicationState], ApplicationState]) -> None:
        """Apply *transition* unless the session it was started in has ended."""
        if session != self._session:
            _logger.debug("Dropping result from ended session %d", session)
            return
        self._holder.update(transition)

    def _fail(
        self,
        session: int,
        exc: Exception,
        fallback: str,
        transition: Callable[[ApplicationState, str], ApplicationState],
    ) -> None:
        message = _message(exc, fallback)
        if isinstance(exc, NoSessionError):
            self._apply(session, lambda s: transition(reducers.auth_failed(s, message), message))
        else:
            self._apply(session, lambda s: transition(s, message))

    # ------------------------------------------------------------------
    # Network-bound intents
    # ------------------------------------------------------------------

    async def _reauthenticate(self) -> None:
        await self.ensure_authenticated()

    async def _submit_search(self, session: int, vin: str) -> None:
        if not await self.ensure_authenticated():
            return
        self._apply(session, lambda s: reducers.list_loading(s, clear_selection=True))
        try:
            detail = await self._repository.vehicle_by_vin(vin)
        except NotFoundError as exc:
            self._fail(session, exc, SEARCH_FAILED_MESSAGE, reducers.vin_not_found)
        except Exception as exc:
            _logger.debug("VIN search for %s failed", vin, exc_info=True)
            self._fail(session, exc, SEARCH_FAILED_MESSAGE, reducers.list_failed)
        else:
            self._apply(session, lambda s: reducers.vin_found(s, detail))

    async def _load_recent_vehicles(self, session: int) -> None:
        if not await self.ensure_authenticated():
            return
        self._apply(session, reducers.list_loading)
        try:
            vehicles = await self._repository.recent_vehicles(self._recent_limit)
        except Exception as exc:
            _logger.debug("Loading recent vehicles failed", exc_info=True)
            self._fail(session, exc, LOAD_FAILED_MESSAGE, reducers.list_failed)
        else:
            self._apply(session, lambda s: reducers.recent_loaded(s, vehicles))

    async def _open_detail(self, session: int, vehicle_id: str) -> None:
        if not await self.ensure_authenticated():
            return
        self._apply(session, reducers.detail_loading)
        try:
            detail = await self._repository.vehicle_detail(vehicle_id)
        except Exception as exc:
            _logger.debug("Loading vehicle %s failed", vehicle_id, exc_info=True)
            self._fail(session, exc, DETAIL_FAILED_MESSAGE, reducers.detail_failed)
        else:
            self._apply(session, lambda s: reducers.detail_loaded(s, detail))
