"""
Request Lifecycle Manager

Owns at most one in-flight suggestion request and discards results of
superseded requests.
"""

import asyncio
import threading
from dataclasses import dataclass, field
from typing import List, Optional

import structlog

from typeahead.domain.exceptions import (
    CancelledRequest,
    InvalidQueryError,
    SuggestionFetchError,
)
from typeahead.domain.interfaces import ISuggestionSource
from typeahead.domain.value_objects import SuggestionSource

logger = structlog.get_logger(__name__)


@dataclass
class RequestToken:
    """Handle for one in-flight fetch."""

    version: int
    query: str
    task: Optional[asyncio.Task] = field(default=None, repr=False)
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True
        if self.task is not None and not self.task.done():
            self.task.cancel()


class RequestLifecycleManager:
    """
    Issues suggestion fetches so that only the most recently issued query can
    ever produce visible results.

    Each fetch gets a new token with a higher version. Issuing a fetch cancels
    the previous token's task, which propagates into the transport. When a
    fetch resolves, its token is compared with the current one; results of a
    superseded token are dropped even if the response was already in the pipe.
    The check-and-set of the current token is guarded by a lock so the
    single-current-request invariant also holds across threads.
    """

    def __init__(
        self,
        source: ISuggestionSource,
        *,
        limit: int = 5,
        timeout_seconds: float = 5.0
    ):
        self.source = source
        self.limit = limit
        self.timeout_seconds = timeout_seconds

        self._lock = threading.Lock()
        self._version = 0
        self._current: Optional[RequestToken] = None

    @property
    def current_token(self) -> Optional[RequestToken]:
        with self._lock:
            return self._current

    def is_current(self, token: RequestToken) -> bool:
        with self._lock:
            return self._current is token and not token.cancelled

    async def fetch_suggestions(self, query: str) -> Optional[List[SuggestionSource]]:
        """
        Fetch raw suggestions for ``query``.

        Args:
            query: Literal user input

        Returns:
            Source items when this request is still the current one, or None
            when it was superseded or cancelled

        Raises:
            InvalidQueryError: If query is not a string
            SuggestionFetchError: On timeout, transport, status or payload failure
        """
        if not isinstance(query, str):
            raise InvalidQueryError(query)

        token = self._issue(query)
        token.task = asyncio.get_running_loop().create_task(self._run(token))

        try:
            await asyncio.wait({token.task})
        except asyncio.CancelledError:
            # The caller went away; take the transport down with it.
            self._retire(token)
            raise

        try:
            result = token.task.result()
        except asyncio.CancelledError:
            self._log_cancelled(CancelledRequest(query, token.version))
            return None
        except CancelledRequest as e:
            self._log_cancelled(e)
            return None
        except SuggestionFetchError:
            if not self.is_current(token):
                logger.debug("Dropping failure of superseded request", query=query, version=token.version)
                return None
            self._retire(token)
            raise

        if not self.is_current(token):
            logger.debug(
                "Discarding stale suggestions",
                query=query,
                version=token.version,
                current_version=self._version
            )
            return None

        self._retire(token)
        return result

    def cancel_in_flight(self) -> None:
        """Cancel the current request, if any."""
        with self._lock:
            token = self._current
            self._current = None
        if token is not None:
            token.cancel()
            logger.debug("In-flight request cancelled", query=token.query, version=token.version)

    def _issue(self, query: str) -> RequestToken:
        with self._lock:
            previous = self._current
            self._version += 1
            token = RequestToken(version=self._version, query=query)
            self._current = token

        if previous is not None:
            previous.cancel()
            logger.debug(
                "Superseded in-flight request",
                previous_query=previous.query,
                previous_version=previous.version,
                query=query
            )
        return token

    def _retire(self, token: RequestToken) -> None:
        with self._lock:
            if self._current is token:
                self._current = None
        token.cancel()

    async def _run(self, token: RequestToken) -> List[SuggestionSource]:
        try:
            return await asyncio.wait_for(
                self.source.fetch(token.query, self.limit),
                timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            if token.cancelled:
                raise CancelledRequest(token.query, token.version)
            logger.warning(
                "Suggestion request timed out",
                query=token.query,
                timeout_seconds=self.timeout_seconds
            )
            raise SuggestionFetchError(
                f"Suggestion request timed out after {self.timeout_seconds}s",
                query=token.query
            )
        except (SuggestionFetchError, CancelledRequest):
            raise
        except Exception as e:
            logger.error(
                "Suggestion source failed unexpectedly",
                query=token.query,
                error=str(e)
            )
            raise SuggestionFetchError(
                f"Unexpected suggestion source error: {e}",
                query=token.query,
                retryable=False
            ) from e

    @staticmethod
    def _log_cancelled(error: CancelledRequest) -> None:
        logger.debug("Suggestion request cancelled", query=error.query, version=error.version)
