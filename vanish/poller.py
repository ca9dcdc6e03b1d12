"""Wait for new mail by listing a mailbox at a fixed interval."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable

from .cancel import CANCELLED, CancelToken
from .errors import CancelledError
from .models import EmailSummary, ListEmailsOptions

if TYPE_CHECKING:
    from .client import VanishClient

logger = logging.getLogger(__name__)


class Poller:
    """Poll one mailbox until a new email shows up.

    A tick fires every ``interval`` seconds counted from the start of
    :meth:`poll`, never on entry: the first listing happens one interval in,
    so an interval longer than the timeout ends without any request. Ticks
    missed while a listing is in flight are dropped.

    "New" means the mailbox total grew past ``initial_count``; the most
    recent summary is returned. Deletions between the baseline and a check
    can mask an arrival.
    """

    def __init__(
        self,
        client: VanishClient,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.clock = clock

    def poll(
        self,
        address: str,
        timeout: float,
        interval: float,
        initial_count: int = 0,
        token: CancelToken | None = None,
    ) -> EmailSummary | None:
        """Return the newest email once one arrives, or None on timeout.

        Raises :class:`CancelledError` when ``token`` is cancelled (or its own
        deadline passes) and re-raises any error from the listing call.
        """
        if interval <= 0:
            raise ValueError("interval must be positive")
        if token is None:
            token = CancelToken(clock=self.clock)

        start = self.clock()
        deadline = start + timeout
        next_tick = start + interval
        checks = 0

        while True:
            if token.wait(max(0.0, next_tick - self.clock())):
                raise CancelledError(token.reason or CANCELLED)

            now = self.clock()
            if now > deadline:
                logger.debug(
                    "Polling %s timed out after %s checks", address, checks
                )
                return None

            checks += 1
            page = self.client.list_emails(
                address, ListEmailsOptions(limit=1), token=token
            )
            logger.debug(
                "Poll check %s for %s: total=%s baseline=%s",
                checks,
                address,
                page.total,
                initial_count,
            )
            if page.total > initial_count and page.data:
                return page.data[0]

            next_tick = self._next_tick(next_tick, interval)

    def _next_tick(self, previous: float, interval: float) -> float:
        upcoming = previous + interval
        now = self.clock()
        if upcoming <= now:
            skipped = int((now - upcoming) // interval) + 1
            upcoming += skipped * interval
        return upcoming
