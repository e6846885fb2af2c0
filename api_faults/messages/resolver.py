"""Resolve error codes into human-readable messages with a bare-code fallback."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as LookupTimeoutError
import logging
from typing import Any
from typing import Protocol

from api_faults.core.config import FaultSettings
from api_faults.core.config import get_fault_settings
from api_faults.messages.catalog import MessageCatalog
from api_faults.messages.catalog import default_catalog
from api_faults.messages.catalog import load_bundles_file

logger = logging.getLogger(__name__)

MessageLookup = Callable[[str, str], str]


class MessageResolver(Protocol):
    """Maps a code plus positional args to display text. Never raises."""

    def resolve(self, code: str, *args: Any) -> str: ...


def format_template(template: str, args: tuple[Any, ...]) -> str:
    """Interpolate ``{0}``-style positional placeholders.

    Templates are returned verbatim when there is nothing to interpolate, so
    literal braces in argument-free messages survive.
    """
    if not args:
        return template
    return template.format(*args)


class CatalogMessageResolver:
    """Default resolver backed by a template lookup for one process-wide locale."""

    def __init__(
        self,
        lookup: MessageLookup | MessageCatalog,
        *,
        locale: str = "ko",
        lookup_timeout_seconds: float | None = None,
        executor: ThreadPoolExecutor | None = None,
    ) -> None:
        if lookup_timeout_seconds is not None and lookup_timeout_seconds <= 0:
            raise ValueError("lookup_timeout_seconds must be positive")

        self._lookup: MessageLookup = lookup.lookup if isinstance(lookup, MessageCatalog) else lookup
        self._locale = locale
        self._lookup_timeout_seconds = lookup_timeout_seconds
        self._executor = executor
        if lookup_timeout_seconds is not None and executor is None:
            self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="message-lookup")

    @property
    def locale(self) -> str:
        return self._locale

    def resolve(self, code: str, *args: Any) -> str:
        try:
            template = self._fetch_template(code)
            return format_template(template, args)
        except Exception:
            logger.debug("Falling back to bare code for message code=%s args=%s", code, args, exc_info=True)
            return code

    def shutdown(self) -> None:
        """Release the lookup pool, if one was created."""
        if self._executor is not None:
            self._executor.shutdown(wait=False)

    def _fetch_template(self, code: str) -> str:
        if self._lookup_timeout_seconds is None or self._executor is None:
            return self._lookup(code, self._locale)

        future = self._executor.submit(self._lookup, code, self._locale)
        try:
            return future.result(timeout=self._lookup_timeout_seconds)
        except LookupTimeoutError:
            future.cancel()
            logger.warning(
                "Message lookup for code=%s exceeded %.3fs",
                code,
                self._lookup_timeout_seconds,
            )
            raise


def build_message_resolver(settings: FaultSettings | None = None) -> CatalogMessageResolver:
    """Create the default resolver from settings, applying any bundle file overrides."""
    settings = settings or get_fault_settings()
    catalog = default_catalog()
    if settings.messages_file:
        catalog = catalog.merged_with(load_bundles_file(settings.messages_file))
        logger.info("Loaded message overrides from %s", settings.messages_file)
    return CatalogMessageResolver(
        catalog,
        locale=settings.default_locale,
        lookup_timeout_seconds=settings.lookup_timeout_seconds,
    )
