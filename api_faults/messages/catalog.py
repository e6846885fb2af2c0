"""Message template bundles keyed by locale and error code."""

from __future__ import annotations

from collections.abc import Iterator
from collections.abc import Mapping
import json
from pathlib import Path
from types import MappingProxyType

BASE_BUNDLE = ""

DEFAULT_BUNDLES: dict[str, dict[str, str]] = {
    "ko": {
        "BAD_REQUEST": "잘못된 요청입니다.",
        "VALIDATION_ERROR": "요청 데이터가 유효하지 않습니다. 잘못된 항목을 확인해주세요.",
        "UNAUTHORIZED": "인증이 필요합니다.",
        "FORBIDDEN": "접근 권한이 없습니다.",
        "NOT_FOUND": "요청하신 리소스를 찾을 수 없습니다.",
        "NO_RESOURCE_FOUND": "요청하신 리소스를 찾을 수 없습니다.",
        "METHOD_NOT_ALLOWED": "지원되지 않는 메서드입니다. 허용: {0}",
        "CONFLICT": "요청이 현재 리소스 상태와 충돌합니다.",
        "TOO_MANY_REQUESTS": "요청이 너무 많습니다. 잠시 후 다시 시도해주세요.",
        "INVALID_JSON": "요청 본문(JSON)을 해석할 수 없습니다.",
        "TYPE_MISMATCH": "파라미터 {0}의 값 {1}는 올바르지 않습니다.",
        "INTERNAL_SERVER_ERROR": "서버 오류가 발생했습니다. 잠시 후 다시 시도해주세요.",
        "SERVICE_UNAVAILABLE": "서비스를 일시적으로 사용할 수 없습니다.",
    },
    "en": {
        "BAD_REQUEST": "The request is invalid.",
        "VALIDATION_ERROR": "The request data is invalid. Check the rejected fields.",
        "UNAUTHORIZED": "Authentication is required.",
        "FORBIDDEN": "You do not have permission to access this resource.",
        "NOT_FOUND": "The requested resource was not found.",
        "NO_RESOURCE_FOUND": "The requested resource was not found.",
        "METHOD_NOT_ALLOWED": "Method not supported. Allowed: {0}",
        "CONFLICT": "The request conflicts with the current resource state.",
        "TOO_MANY_REQUESTS": "Too many requests. Please slow down.",
        "INVALID_JSON": "The request body is not valid JSON.",
        "TYPE_MISMATCH": "Value {1} is not valid for parameter {0}.",
        "INTERNAL_SERVER_ERROR": "An internal error occurred. Please try again later.",
        "SERVICE_UNAVAILABLE": "The service is temporarily unavailable.",
    },
}


class MessageNotFoundError(LookupError):
    """Raised when no bundle in the locale chain defines a code."""

    def __init__(self, code: str, locale: str) -> None:
        super().__init__(f"No message template for code={code!r} locale={locale!r}")
        self.code = code
        self.locale = locale


def locale_chain(locale: str) -> Iterator[str]:
    """Yield bundle names from most to least specific: ``ko_KR``, ``ko``, base."""
    normalized = locale.replace("-", "_").strip()
    if not normalized:
        raise ValueError("locale must not be blank")
    parts = normalized.split("_")
    for size in range(len(parts), 0, -1):
        yield "_".join(parts[:size])
    yield BASE_BUNDLE


class MessageCatalog:
    """Read-only template store populated once at startup."""

    def __init__(self, bundles: Mapping[str, Mapping[str, str]]) -> None:
        self._bundles = MappingProxyType(
            {locale: MappingProxyType(dict(templates)) for locale, templates in bundles.items()}
        )

    @property
    def locales(self) -> list[str]:
        return sorted(self._bundles)

    def lookup(self, code: str, locale: str) -> str:
        """Return the template for ``code``, walking the locale chain."""
        for bundle_name in locale_chain(locale):
            bundle = self._bundles.get(bundle_name)
            if bundle is not None and code in bundle:
                return bundle[code]
        raise MessageNotFoundError(code, locale)

    def merged_with(self, overrides: Mapping[str, Mapping[str, str]]) -> MessageCatalog:
        """Return a new catalog where ``overrides`` replace or extend templates."""
        merged: dict[str, dict[str, str]] = {locale: dict(templates) for locale, templates in self._bundles.items()}
        for locale, templates in overrides.items():
            merged.setdefault(locale, {}).update(templates)
        return MessageCatalog(merged)


def load_bundles_file(path: str | Path) -> dict[str, dict[str, str]]:
    """Load ``{"<locale>": {"<CODE>": "<template>"}}`` from a JSON file."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"Message bundle file {path} must contain a JSON object")

    bundles: dict[str, dict[str, str]] = {}
    for locale, templates in raw.items():
        if not isinstance(templates, dict):
            raise ValueError(f"Bundle {locale!r} in {path} must be a JSON object")
        bundles[str(locale)] = {str(code): str(template) for code, template in templates.items()}
    return bundles


def default_catalog() -> MessageCatalog:
    return MessageCatalog(DEFAULT_BUNDLES)
