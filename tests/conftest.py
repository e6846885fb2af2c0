"""Shared pytest fixtures for api-faults test suites."""

from __future__ import annotations

from collections.abc import Generator
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
import sys
from typing import Annotated
from typing import Any

import pytest
from fastapi import APIRouter
from fastapi import FastAPI
from fastapi import HTTPException
from fastapi import Path as PathParam
from fastapi import Query
from fastapi.testclient import TestClient
from pydantic import BaseModel
from pydantic import Field
from pydantic import model_validator

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from api_faults.core.dispatcher import FaultDispatcher  # noqa: E402
from api_faults.core.errors import ApplicationError  # noqa: E402
from api_faults.core.errors import NotFoundError  # noqa: E402
from api_faults.core.handlers import register_error_handlers  # noqa: E402

CUSTOM_MESSAGE = "MessageResolver를 사용하지 않은 커스텀 메세지"


class StubResolver:
    """Resolver returning canned messages and recording every call.

    Keys are either a bare code or a ``(code, args)`` tuple; unknown codes
    resolve to themselves like the real resolver.
    """

    def __init__(self, messages: Mapping[Any, str] | None = None) -> None:
        self.messages = dict(messages or {})
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def resolve(self, code: str, *args: Any) -> str:
        self.calls.append((code, args))
        if (code, args) in self.messages:
            return self.messages[(code, args)]
        return self.messages.get(code, code)


class ExplodingResolver:
    """Resolver that fails on every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def resolve(self, code: str, *args: Any) -> str:
        self.calls.append((code, args))
        raise AssertionError(f"resolver called with {code!r}")


class OrderErrorCode(Enum):
    ORDER_NOT_FOUND = (404, "ORDER_NOT_FOUND")
    ORDER_ALREADY_SHIPPED = (409, "ORDER_ALREADY_SHIPPED")

    def __init__(self, status: int, code: str) -> None:
        self.status = status
        self.code = code


class PersonRequest(BaseModel):
    name: str = Field(min_length=1)
    age: int = Field(ge=1)


class PeriodRequest(BaseModel):
    start: int = Field(ge=0)
    end: int

    @model_validator(mode="after")
    def end_after_start(self) -> PeriodRequest:
        if self.end < self.start:
            raise ValueError("end must not precede start")
        return self


def build_test_router() -> APIRouter:
    router = APIRouter(prefix="/test")

    @router.get("/app-ex")
    def throw_app_exception() -> None:
        raise NotFoundError()

    @router.get("/app-ex-custom")
    def throw_app_exception_with_message() -> None:
        raise NotFoundError(message=CUSTOM_MESSAGE)

    @router.get("/orders/{order_id}")
    def throw_domain_code(order_id: str) -> None:
        raise ApplicationError(OrderErrorCode.ORDER_NOT_FOUND, order_id)

    @router.get("/http-ex")
    def throw_http_exception() -> None:
        raise HTTPException(status_code=404, detail="Client not found")

    @router.get("/http-forbidden")
    def throw_bare_http_exception() -> None:
        raise HTTPException(status_code=403)

    @router.get("/rate-limited")
    def throw_rate_limited() -> None:
        raise HTTPException(status_code=429, detail="Slow down", headers={"Retry-After": "10"})

    @router.get("/maintenance")
    def throw_service_unavailable() -> None:
        raise HTTPException(status_code=503, detail="Maintenance")

    @router.get("/upstream")
    def throw_bad_gateway() -> None:
        raise HTTPException(status_code=502)

    @router.post("/invalid-request-body")
    def validate_body(request: PersonRequest) -> dict[str, str]:
        return {"name": request.name}

    @router.post("/period")
    def validate_period(request: PeriodRequest) -> dict[str, int]:
        return {"length": request.end - request.start}

    @router.get("/invalid-path-variable/{id}")
    def validate_path(id: Annotated[str, PathParam(pattern=r"\S")]) -> dict[str, str]:
        return {"id": id}

    @router.get("/invalid-request-param")
    def validate_query(id: Annotated[str, Query(min_length=1)]) -> dict[str, str]:
        return {"id": id}

    @router.get("/ex")
    def throw_exception() -> None:
        raise RuntimeError("boom")

    @router.post("/invalid-method")
    def post_only() -> str:
        return "ok"

    @router.post("/invalid-json")
    def parse_json(request: PersonRequest) -> str:
        return "ok"

    @router.get("/mismatch/{id}")
    def type_mismatch(id: int) -> str:
        return "ok"

    return router


def build_test_client(dispatcher: FaultDispatcher | None = None) -> TestClient:
    app = FastAPI()
    register_error_handlers(app, dispatcher)
    app.include_router(build_test_router())
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def stub_resolver() -> StubResolver:
    return StubResolver()


@pytest.fixture
def dispatcher(stub_resolver: StubResolver) -> FaultDispatcher:
    return FaultDispatcher(stub_resolver)


@pytest.fixture
def client(dispatcher: FaultDispatcher) -> Generator[TestClient, None, None]:
    """Test client whose messages come from ``stub_resolver``."""
    with build_test_client(dispatcher) as test_client:
        yield test_client


@pytest.fixture
def exploding_resolver() -> ExplodingResolver:
    return ExplodingResolver()


@pytest.fixture
def make_client() -> Generator[Any, None, None]:
    """Factory for test clients bound to an explicit dispatcher."""
    clients: list[TestClient] = []

    def _make(dispatcher: FaultDispatcher | None = None) -> TestClient:
        test_client = build_test_client(dispatcher)
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        test_client.close()
