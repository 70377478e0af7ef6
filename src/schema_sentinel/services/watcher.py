"""
Response Watcher
=================
httpx response hooks that feed every successful JSON response an
application receives into a Sentinel.

    client = httpx.Client(event_hooks={"response": [SchemaWatcher(sentinel)]})

or, for an existing client, ``SchemaWatcher(sentinel).install(client)``.

Only 2xx responses with a JSON content type are profiled. Profiling must
never break the caller's request, so any error inside the hook is logged and
swallowed.
"""

import logging
from typing import Union

import httpx

from schema_sentinel.services.sentinel import Sentinel

logger = logging.getLogger("schema_sentinel")


def should_profile(response: httpx.Response) -> bool:
    content_type = response.headers.get("content-type", "")
    return response.is_success and "json" in content_type.lower()


class _BaseWatcher:

    def __init__(self, sentinel: Sentinel):
        self.sentinel = sentinel

    def install(self, client: Union[httpx.Client, httpx.AsyncClient]):
        hooks = client.event_hooks
        hooks["response"] = [*hooks.get("response", []), self]
        client.event_hooks = hooks
        return client

    def _observe(self, response: httpx.Response) -> None:
        request = response.request
        self.sentinel.process(request.method, str(request.url), response.status_code, response.json())

    @staticmethod
    def _log_failure(response: httpx.Response, error: Exception) -> None:
        logger.error(f"❌ SchemaWatcher: could not profile {response.request.method} {response.request.url}: {error}")


class SchemaWatcher(_BaseWatcher):
    """Response hook for ``httpx.Client``."""

    def __call__(self, response: httpx.Response) -> None:
        if not should_profile(response):
            return
        try:
            response.read()
            self._observe(response)
        except Exception as e:
            self._log_failure(response, e)


class AsyncSchemaWatcher(_BaseWatcher):
    """Response hook for ``httpx.AsyncClient``. Profiling itself runs synchronously."""

    async def __call__(self, response: httpx.Response) -> None:
        if not should_profile(response):
            return
        try:
            await response.aread()
            self._observe(response)
        except Exception as e:
            self._log_failure(response, e)
