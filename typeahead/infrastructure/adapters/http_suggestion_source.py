"""
HTTP Suggestion Source

Fetches taxonomy and attribute suggestions from the remote suggestion endpoint
and converts them into domain source items.
"""

import time
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError

from typeahead.domain.exceptions import SuggestionFetchError
from typeahead.domain.interfaces import ISuggestionSource
from typeahead.domain.value_objects import AttributeSource, SuggestionSource, TaxonomySource
from typeahead.schemas.suggestion_schemas import AttributeItem, SubcategoryItem, SuggestionsPayload

logger = structlog.get_logger(__name__)


def taxonomy_target(category_slug: str, subcategory_slug: str) -> str:
    """Search route filtered by category and subcategory."""
    return f"/#/search?cat={category_slug}&sub={subcategory_slug}"


def attribute_target(category_slug: str, subcategory_slug: str, field_name: str, value: str) -> str:
    """Search route additionally filtered by one attribute value."""
    return f"{taxonomy_target(category_slug, subcategory_slug)}&{field_name}={quote(value, safe='')}"


class HttpSuggestionSource(ISuggestionSource):
    """
    Suggestion source backed by ``GET <url>?q=<query>&limit=<n>``.

    Requests are idempotent GETs, so a failed fetch can always be retried.
    The query is passed as a query parameter and URL-encoded by httpx;
    it is never interpreted as a pattern.

    Args:
        url: Full endpoint URL
        timeout_seconds: Transport timeout
        client: Optional shared ``httpx.AsyncClient`` (owned by the caller)
    """

    def __init__(
        self,
        url: str,
        *,
        timeout_seconds: float = 5.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.url = url
        self.timeout_seconds = timeout_seconds
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout_seconds,
            headers={"Accept": "application/json", "User-Agent": "Typeahead-Engine/1.0"}
        )

    async def check_health(self) -> Dict[str, Any]:
        """Return adapter configuration (does not call the endpoint)."""
        return {
            "status": "healthy" if not self._client.is_closed else "closed",
            "service": "HttpSuggestionSource",
            "url": self.url,
            "timeout_seconds": self.timeout_seconds
        }

    async def fetch(self, query: str, limit: int) -> List[SuggestionSource]:
        """
        Fetch and convert suggestions.

        Args:
            query: Literal search text
            limit: Per-category result bound

        Returns:
            Taxonomy items first, then attribute items, in response order

        Raises:
            SuggestionFetchError: On timeout, transport error, non-2xx status
                or malformed payload
        """
        start_time = time.time()

        try:
            response = await self._client.get(
                self.url,
                params={"q": query, "limit": limit},
                timeout=self.timeout_seconds
            )
            response.raise_for_status()
            body = response.json()

        except httpx.TimeoutException as e:
            logger.warning("Suggestion fetch timeout", query=query, timeout_seconds=self.timeout_seconds)
            raise SuggestionFetchError(
                f"Suggestion request timed out after {self.timeout_seconds}s",
                query=query
            ) from e

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.warning(
                "Suggestion fetch failed with HTTP error",
                query=query,
                status_code=status_code,
                response_body=e.response.text[:500]
            )
            raise SuggestionFetchError(
                f"HTTP {status_code}: {e.response.reason_phrase}",
                query=query,
                status_code=status_code,
                retryable=status_code >= 500 or status_code == 429
            ) from e

        except httpx.RequestError as e:
            logger.warning("Suggestion fetch connection error", query=query, error=str(e))
            raise SuggestionFetchError(f"Connection error: {e}", query=query) from e

        except ValueError as e:
            logger.warning("Suggestion payload is not JSON", query=query, error=str(e))
            raise SuggestionFetchError(
                "Malformed suggestion payload",
                query=query,
                retryable=False
            ) from e

        items = self._parse(body, query)

        logger.debug(
            "Suggestions fetched",
            query=query,
            count=len(items),
            response_time_ms=int((time.time() - start_time) * 1000)
        )
        return items

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _parse(self, body: Any, query: str) -> List[SuggestionSource]:
        try:
            payload = SuggestionsPayload.model_validate(body)
        except PydanticValidationError as e:
            logger.warning("Suggestion payload failed validation", query=query, errors=e.error_count())
            raise SuggestionFetchError(
                "Malformed suggestion payload",
                query=query,
                retryable=False
            ) from e

        items: List[SuggestionSource] = [self._to_taxonomy(sub) for sub in payload.subcategories]
        for field_label, attributes in payload.attributes.items():
            items.extend(self._to_attribute(field_label, attr) for attr in attributes)
        return items

    @staticmethod
    def _to_taxonomy(sub: SubcategoryItem) -> TaxonomySource:
        return TaxonomySource(
            id=sub.id,
            label=sub.name,
            parent_label=sub.category_name,
            icon=sub.icon,
            navigation_target=taxonomy_target(sub.category_slug, sub.slug),
        )

    @staticmethod
    def _to_attribute(field_label: str, attr: AttributeItem) -> AttributeSource:
        return AttributeSource(
            field_name=attr.field_name,
            field_label=field_label,
            value=attr.value,
            context_label=attr.subcategory_name,
            icon=attr.icon,
            navigation_target=attribute_target(
                attr.category_slug, attr.subcategory_slug, attr.field_name, attr.value
            ),
        )
