"""
Helpers for calling host-supplied collaborators that may be sync or async.
"""
import functools
import inspect
from typing import Any, Callable

from anyio import to_thread


async def call_collaborator(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """
    Call a collaborator and return its result.

    Coroutine functions are awaited on the running loop. Plain callables are
    treated as blocking work (downloads, disk writes) and run in a worker
    thread so the loop keeps serving other readers.
    """
    if inspect.iscoroutinefunction(fn):
        result = fn(*args, **kwargs)
    else:
        result = await to_thread.run_sync(functools.partial(fn, *args, **kwargs))
    if inspect.isawaitable(result):
        result = await result
    return result


async def maybe_await(value: Any) -> Any:
    """Await ``value`` when it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value
