"""
Registry of dependency installs currently in progress.

Resolutions running in parallel share one ledger so that a target claimed by
one of them is awaited by the others instead of being installed twice.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Tuple

from ..core.error import UnavailableError

logger = logging.getLogger(__name__)


class InstallLedger:
    def __init__(self):
        self._pending: Dict[str, "asyncio.Future[Any]"] = {}

    def is_pending(self, record_id: str) -> bool:
        return record_id in self._pending

    async def install(self, record_id: str, install_fn: Callable[[], Awaitable[Any]]) -> Tuple[bool, Any]:
        """
        Run ``install_fn`` unless another resolution already claimed ``record_id``.

        Returns:
            ``(True, value)`` when this call performed the install,
            ``(False, value)`` when it waited on another resolution's install

        Raises:
            Whatever the owning install raised, in the owner and every waiter.
        """
        pending = self._pending.get(record_id)
        if pending is not None:
            logger.debug("Waiting on in-progress install of %s", record_id)
            return False, await asyncio.shield(pending)

        future: "asyncio.Future[Any]" = asyncio.get_running_loop().create_future()
        self._pending[record_id] = future
        try:
            value = await install_fn()
        except Exception as exc:
            future.set_exception(exc)
            # Counts as retrieved even when no waiter exists.
            future.exception()
            raise
        else:
            future.set_result(value)
            return True, value
        finally:
            if not future.done():
                future.set_exception(UnavailableError(f"Install of {record_id} was interrupted"))
                future.exception()
            self._pending.pop(record_id, None)
