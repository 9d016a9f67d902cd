import asyncio
import functools
import json
import logging
import threading
from typing import Any, Callable, List, Optional

from aiohttp import web
from aiohttp.web_request import Request

from gce_autoscaler.autoscaler.exception import TransportFailure
from gce_autoscaler.autoscaler.mixins import AutoScaler
from gce_autoscaler.autoscaler.reconciler import AUTOSCALER_TYPE
from gce_autoscaler.autoscaler.types import FailureKind, ReconciliationResult

logger = logging.getLogger(__name__)

# aiohttp only cancels a handler on client disconnect when asked to, the pending operation wait hangs off that
SERVER_SETTINGS = dict(handler_cancellation=True)


class GCEAutoScalerAdapter:
    """
    Exposes an AutoScaler to the overlord as a JSON webhook.

    Every request is a POST of {"action": ..., ...}. The autoscaler calls block on the cloud API, so they run in the
    event loop's default executor; when the request goes away while an operation is being awaited, the wait is
    cancelled.
    """

    def __init__(self, autoscaler: AutoScaler):
        self._autoscaler = autoscaler

    async def webhook_handler(self, request: Request):
        try:
            request_json = await request.json()
        except json.JSONDecodeError:
            return web.json_response({"error": "Request body is not valid JSON"}, status=web.HTTPBadRequest.status_code)

        if not isinstance(request_json, dict) or "action" not in request_json:
            return web.json_response({"error": "No action specified"}, status=web.HTTPBadRequest.status_code)

        action = request_json["action"]

        if action == "get_autoscaler_info":
            env_config = self._autoscaler.get_env_config()
            return web.json_response(
                {
                    "type": AUTOSCALER_TYPE,
                    "min_num_workers": self._autoscaler.get_min_num_workers(),
                    "max_num_workers": self._autoscaler.get_max_num_workers(),
                    "target_workers": env_config.target_workers,
                    "env_config": env_config.to_dict(),
                },
                status=web.HTTPOk.status_code,
            )

        elif action == "provision":
            return await self._reconcile(self._autoscaler.provision)

        elif action == "terminate":
            ips = _string_list(request_json, "ips")
            if ips is None:
                return _bad_argument("ips")
            return await self._reconcile(self._autoscaler.terminate, ips)

        elif action == "terminate_with_ids":
            ids = _string_list(request_json, "ids")
            if ids is None:
                return _bad_argument("ids")
            return await self._reconcile(self._autoscaler.terminate_with_ids, ids)

        elif action == "ip_to_id_lookup":
            ips = _string_list(request_json, "ips")
            if ips is None:
                return _bad_argument("ips")
            return await self._lookup(self._autoscaler.ip_to_id_lookup, ips, "ids")

        elif action == "id_to_ip_lookup":
            ids = _string_list(request_json, "ids")
            if ids is None:
                return _bad_argument("ids")
            return await self._lookup(self._autoscaler.id_to_ip_lookup, ids, "ips")

        else:
            return web.json_response({"error": "Unknown action"}, status=web.HTTPBadRequest.status_code)

    def create_app(self):
        app = web.Application()
        app.router.add_post("/", self.webhook_handler)
        return app

    async def _reconcile(self, call: Callable[..., ReconciliationResult], *args: Any):
        cancel_event = threading.Event()
        loop = asyncio.get_running_loop()
        try:
            result = await loop.run_in_executor(None, functools.partial(call, *args, cancel_event=cancel_event))
        except asyncio.CancelledError:
            logger.warning(f"{call.__name__} request cancelled, cancelling the pending operation wait")
            cancel_event.set()
            raise

        return web.json_response(result.to_dict(), status=_status_code(result))

    async def _lookup(self, call: Callable[[List[str]], List[str]], values: List[str], key: str):
        loop = asyncio.get_running_loop()
        try:
            found = await loop.run_in_executor(None, call, values)
        except TransportFailure as e:
            logger.error(f"{call.__name__} failed: {e}")
            return web.json_response({"error": str(e)}, status=web.HTTPBadGateway.status_code)

        return web.json_response({key: found}, status=web.HTTPOk.status_code)


def _string_list(request_json: dict, key: str) -> Optional[List[str]]:
    values = request_json.get(key)
    if not isinstance(values, list) or not all(isinstance(value, str) for value in values):
        return None

    return values


def _bad_argument(key: str):
    return web.json_response({"error": f"'{key}' must be a list of strings"}, status=web.HTTPBadRequest.status_code)


def _status_code(result: ReconciliationResult) -> int:
    if result.failure is None:
        return web.HTTPOk.status_code

    if result.failure.kind == FailureKind.Timeout:
        return web.HTTPGatewayTimeout.status_code

    return web.HTTPBadGateway.status_code
