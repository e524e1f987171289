"""Small asyncio helpers."""

import inspect
from typing import Any


async def maybe_await(value: Any) -> Any:
    """Await the value if it is awaitable, so callbacks may be sync or async."""
    if inspect.isawaitable(value):
        return await value
    return value
