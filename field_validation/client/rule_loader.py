"""
Schema rule loader for editor-facing surfaces.

Fetches a schema's rules over HTTP, caches them for the loader's lifetime
and shares one in-flight fetch between concurrent callers. Failures fail
open: callers receive an empty rule set and the next call retries.
Save-time enforcement never goes through this cache.
"""

import os
import threading
from collections.abc import Callable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

import httpx

from field_validation.core.models import ConfigurationError, RuleConfiguration
from field_validation.observability.logger import get_logger
from field_validation.observability.metrics import (
    increment_counter,
    loader_cache_hits_total,
    loader_fetches_total,
)

logger = get_logger(__name__)

DEFAULT_RULES_ENDPOINT = "http://localhost:8000/admin/field-validation/rules"
DEFAULT_FETCH_TIMEOUT = 10.0

RuleSet = dict[str, RuleConfiguration]
RulesFetcher = Callable[[str], Mapping[str, RuleConfiguration]]


class FetchError(Exception):
    """Raised by a transport when a schema's rules cannot be fetched."""

    def __init__(self, schema_id: str, message: str):
        self.schema_id = schema_id
        super().__init__(f"Failed to fetch rules for schema {schema_id}: {message}")


class HttpRulesFetcher:
    """
    Fetches rules from the rules read endpoint.

    GET <endpoint>?schemaId=<id> is expected to answer
    {"success": true, "rules": {fieldName: RuleConfiguration}}.
    """

    def __init__(
        self,
        endpoint: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ):
        """
        Initialize the HTTP transport.

        Args:
            endpoint: Rules endpoint URL (defaults to env var RULES_ENDPOINT)
            timeout: Request timeout in seconds (defaults to env var RULES_FETCH_TIMEOUT)
            client: httpx client to reuse (one is created otherwise)
        """
        self.endpoint = endpoint or os.getenv("RULES_ENDPOINT", DEFAULT_RULES_ENDPOINT)
        if timeout is None:
            timeout = float(os.getenv("RULES_FETCH_TIMEOUT", str(DEFAULT_FETCH_TIMEOUT)))
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=self.timeout)

    def __call__(self, schema_id: str) -> RuleSet:
        """
        Fetch and parse one schema's rules.

        Raises:
            FetchError: On transport errors, timeouts, non-200 answers or bad payloads
        """
        try:
            response = self._client.get(
                self.endpoint,
                params={"schemaId": schema_id},
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise FetchError(schema_id, f"{type(e).__name__}: {e}") from e

        if response.status_code != 200:
            raise FetchError(schema_id, f"HTTP {response.status_code}: {response.text[:200]}")

        try:
            payload = response.json()
        except ValueError as e:
            raise FetchError(schema_id, "response is not JSON") from e

        if not isinstance(payload, dict) or payload.get("success") is not True:
            message = payload.get("message") if isinstance(payload, dict) else None
            raise FetchError(schema_id, message or "endpoint reported failure")

        rules: Any = payload.get("rules") or {}
        if isinstance(rules, list) and not rules:
            rules = {}
        if not isinstance(rules, dict):
            raise FetchError(schema_id, "'rules' is not an object")

        try:
            return {
                field_name: RuleConfiguration.from_payload(config, field_name=field_name)
                for field_name, config in rules.items()
            }
        except ConfigurationError as e:
            raise FetchError(schema_id, str(e)) from e

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


class SchemaRuleLoader:
    """
    Per-session cache of schema rules with fetch de-duplication.

    Usage:
        with SchemaRuleLoader() as loader:
            loader.load_rules_for_schema("7", show_indicators)
    """

    def __init__(self, fetch: RulesFetcher | None = None, max_workers: int = 4):
        """
        Initialize the loader.

        Args:
            fetch: Callable returning a schema's rules or raising (HttpRulesFetcher by default)
            max_workers: Size of the thread pool running fetches
        """
        self._fetch = fetch or HttpRulesFetcher()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="rule-loader")
        self._lock = threading.Lock()
        self._cache: dict[str, RuleSet] = {}
        self._in_flight: dict[str, Future] = {}

    def fetch_rules(self, schema_id: str) -> Future:
        """
        Future resolving to the schema's rules.

        Cached results come back as an already-completed future; a fetch in
        progress for the same schema is shared rather than repeated.
        """
        schema_id = str(schema_id)

        with self._lock:
            cached = self._cache.get(schema_id)
            if cached is not None:
                increment_counter(loader_cache_hits_total, source="cache")
                future: Future = Future()
                future.set_result(dict(cached))
                return future

            future = self._in_flight.get(schema_id)
            if future is not None:
                increment_counter(loader_cache_hits_total, source="in_flight")
                return future

            future = self._executor.submit(self._run_fetch, schema_id)
            self._in_flight[schema_id] = future
            return future

    def load_rules_for_schema(self, schema_id: str, on_ready: Callable[[RuleSet], Any]) -> None:
        """
        Deliver the schema's rules to ``on_ready``.

        The callback runs synchronously when the rules are cached, otherwise
        on the fetching thread once the (shared) fetch resolves. Every
        callback receives its own copy of the mapping; a failed fetch
        delivers an empty one.
        """
        self.fetch_rules(schema_id).add_done_callback(lambda f: on_ready(dict(f.result())))

    def _run_fetch(self, schema_id: str) -> RuleSet:
        try:
            rules = dict(self._fetch(schema_id))
        except Exception as e:
            # Fail open: editor surfaces degrade to "no rules", nothing is cached
            increment_counter(loader_fetches_total, status="failure")
            logger.warning(
                f"Rule fetch for schema {schema_id} failed, using no rules: {e}",
                extra={"schema_id": schema_id, "error_type": type(e).__name__},
            )
            with self._lock:
                self._in_flight.pop(schema_id, None)
            return {}

        increment_counter(loader_fetches_total, status="success")
        with self._lock:
            self._cache[schema_id] = rules
            self._in_flight.pop(schema_id, None)
        logger.debug(f"Loaded {len(rules)} rule(s) for schema {schema_id}")
        return dict(rules)

    def cached_rules(self, schema_id: str) -> RuleSet | None:
        """Cached rules for a schema, without fetching."""
        with self._lock:
            cached = self._cache.get(str(schema_id))
        return None if cached is None else dict(cached)

    def invalidate(self, schema_id: str) -> None:
        """Drop a schema's cache entry (after the schema was saved)."""
        with self._lock:
            self._cache.pop(str(schema_id), None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def close(self) -> None:
        """Wait for running fetches and release the thread pool and transport."""
        self._executor.shutdown(wait=True)
        close = getattr(self._fetch, "close", None)
        if callable(close):
            close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
