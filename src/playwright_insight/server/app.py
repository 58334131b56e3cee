"""Starlette ASGI application for the dashboard API."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from datetime import date, tzinfo
from functools import partial, wraps
from typing import Any, Optional

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from ..config import DashboardConfig
from ..exceptions import PlaywrightInsightError
from ..results.overrides import OverrideStore
from .api import DashboardService

logger = logging.getLogger(__name__)

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

Handler = Callable[[Request, DashboardService], Any]


def _json(data: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(data, status_code=status_code, headers=NO_STORE_HEADERS)


async def _json_body(request: Request) -> dict[str, Any]:
    """Decoded JSON object body.

    Raises:
        ValueError: If the body is not JSON or not an object
    """
    try:
        body = await request.json()
    except json.JSONDecodeError:
        raise ValueError("request body must be JSON")
    if not isinstance(body, dict):
        raise ValueError("request body must be a JSON object")
    return body


async def _respond(request: Request, call: Callable[[], Any]) -> JSONResponse:
    """Run *call* off the event loop and map its errors to responses."""
    try:
        return _json(await run_in_threadpool(call))
    except PlaywrightInsightError as e:
        if not e.is_client_visible:
            logger.error("%s %s failed: %s", request.method, request.url.path, e)
        return _json(e.to_payload(), status_code=e.http_status)
    except ValueError as e:
        return _json({"error": str(e)}, status_code=400)


def create_app(
    config: DashboardConfig,
    overrides: Optional[OverrideStore] = None,
    today: Optional[date] = None,
    tz: Optional[tzinfo] = None,
) -> Starlette:
    """Build the Starlette application serving *config*'s results tree.

    Handlers read files synchronously, so each one runs in the threadpool.

    Args:
        config: Dashboard configuration
        overrides: Override store shared by all requests (JSON file when omitted)
        today: Fixed last day of the flaky window (wall clock when omitted)
        tz: Zone used for rendered timestamps
    """

    def make_service() -> DashboardService:
        return DashboardService(config, overrides=overrides, today=today, tz=tz)

    def endpoint(handler: Handler) -> Callable[[Request], Awaitable[JSONResponse]]:
        """Run *handler* with a fresh service."""

        @wraps(handler)
        async def wrapper(request: Request) -> JSONResponse:
            return await _respond(request, partial(handler, request, make_service()))

        return wrapper

    @endpoint
    def api_results(request: Request, service: DashboardService) -> Any:
        return service.latest_results(request.query_params.get("date") or None)

    @endpoint
    def api_all(request: Request, service: DashboardService) -> Any:
        return service.all_live_documents()

    @endpoint
    def api_dates(request: Request, service: DashboardService) -> Any:
        return service.available_dates()

    @endpoint
    def api_history(request: Request, service: DashboardService) -> Any:
        return service.archive_history()

    @endpoint
    def api_trends(request: Request, service: DashboardService) -> Any:
        return service.trends()

    @endpoint
    def api_suite_durations(request: Request, service: DashboardService) -> Any:
        return service.suite_durations()

    @endpoint
    def api_slowest(request: Request, service: DashboardService) -> Any:
        raw = request.query_params.get("limit")
        return service.slowest(int(raw) if raw else None)

    @endpoint
    def api_archive(request: Request, service: DashboardService) -> Any:
        return service.archive()

    @endpoint
    def api_flaky(request: Request, service: DashboardService) -> Any:
        return service.flaky_tests()

    @endpoint
    def api_case_files(request: Request, service: DashboardService) -> Any:
        return service.case_time_files()

    @endpoint
    def api_case_history(request: Request, service: DashboardService) -> Any:
        test_id = request.query_params.get("testId")
        if not test_id:
            raise ValueError("testId parameter is required")
        return service.case_time_history(test_id)

    @endpoint
    def api_test_cases(request: Request, service: DashboardService) -> Any:
        return service.test_cases()

    @endpoint
    def api_coverage(request: Request, service: DashboardService) -> Any:
        return service.coverage()

    async def api_overrides(request: Request) -> JSONResponse:
        service = make_service()
        if request.method == "DELETE":
            return await _respond(request, service.clear_overrides)
        if request.method == "POST":
            try:
                body = await _json_body(request)
            except ValueError as e:
                return _json({"error": str(e)}, status_code=400)
            key, status = str(body.get("key") or ""), str(body.get("status") or "")
            return await _respond(request, partial(service.set_override, key, status))
        return await _respond(request, service.list_overrides)

    routes = [
        Route("/api/test-results", api_results),
        Route("/api/test-results/all", api_all),
        Route("/api/test-results/dates", api_dates),
        Route("/api/test-results/history", api_history),
        Route("/api/test-results/trends", api_trends),
        Route("/api/test-results/suite-durations", api_suite_durations),
        Route("/api/test-results/slowest", api_slowest),
        Route("/api/test-results/archive", api_archive, methods=["POST"]),
        Route("/api/flaky-tests", api_flaky),
        Route("/api/case-times/files", api_case_files),
        Route("/api/case-times/history", api_case_history),
        Route("/api/test-cases", api_test_cases),
        Route("/api/coverage/files", api_coverage),
        Route("/api/overrides", api_overrides, methods=["GET", "POST", "DELETE"]),
    ]

    return Starlette(routes=routes)
