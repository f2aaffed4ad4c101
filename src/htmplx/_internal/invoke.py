"""Invoke helpers — call sync or async factories uniformly.

Data and globals factories can be ``def`` or ``async def``. This module
provides a single helper so the sync/async check lives in exactly one
place.

Usage::

    from htmplx._internal.invoke import invoke

    data = await invoke(factory, request)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it's awaitable.

    Works with both sync and async callables::

        # sync: returns immediately
        def data(request):
            return RequestDataMap(title="Home")

        # async: the coroutine is awaited
        async def data(request):
            return RequestDataMap(user=await load_user(request))
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
