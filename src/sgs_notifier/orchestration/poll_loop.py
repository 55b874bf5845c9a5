"""The poll-and-notify loop.

One cycle walks through four steps in order:

1. Ask the business-hours gate whether texts may go out now.
2. Load the Twilio credentials; a missing value aborts the cycle
   before anything touches the network.
3. Fetch every unacknowledged contact.
4. Text each contact in turn, pausing between sends so the provider is
   never hit in a burst.  A failed send is logged and the batch moves on.

:func:`run_forever` repeats cycles on a fixed interval.  Cycles never
overlap: when one overruns the interval, the ticks it missed collapse
into the next interval boundary after it finishes.  Nothing that goes
wrong inside a cycle stops the loop.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy.engine import Engine

from ..config import DEFAULT_POLL_INTERVAL_SECONDS, DEFAULT_SEND_DELAY_SECONDS
from ..errors import ContactStoreError, MissingCredentialsError, NotificationError
from ..models import Contact
from ..notify.twilio import MessagingCredentials, TwilioSender
from ..store.contacts import fetch_unacknowledged
from .gate import should_run

logger = logging.getLogger(__name__)

Gate = Callable[[Optional[datetime]], bool]
SenderFactory = Callable[[MessagingCredentials], TwilioSender]
CredentialsLoader = Callable[[], MessagingCredentials]
Fetcher = Callable[[Engine], List[Contact]]
Sleep = Callable[[float], None]


@dataclass
class CycleResult:
    """What a single poll cycle did.

    ``skipped`` is set when the gate was closed and ``error`` when the
    cycle was aborted before notifying anyone.
    """

    skipped: bool = False
    error: Optional[str] = None
    attempted: int = 0
    sent: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def run_cycle(
    engine: Engine,
    *,
    now: Optional[datetime] = None,
    gate: Gate = should_run,
    load_credentials: CredentialsLoader = MessagingCredentials.from_env,
    fetch: Fetcher = fetch_unacknowledged,
    sender_factory: SenderFactory = TwilioSender,
    sleep: Sleep = time.sleep,
    send_delay: float = DEFAULT_SEND_DELAY_SECONDS,
) -> CycleResult:
    """Run one gated fetch-and-notify pass.

    Per-cycle failures (missing credentials, store errors) are logged
    and reported in the returned :class:`CycleResult`; they are not
    raised.  Per-contact send failures are logged and counted.
    """
    result = CycleResult()
    if not gate(now):
        logger.info("Outside of work hours, skipping notifications")
        result.skipped = True
        return result

    try:
        credentials = load_credentials()
    except MissingCredentialsError as exc:
        logger.error("Invalid messaging credentials, please check the server env: %s", exc)
        result.error = str(exc)
        return result

    logger.info("Checking contacts table at: %s", (now or datetime.now(timezone.utc)).isoformat())
    try:
        contacts = fetch(engine)
    except ContactStoreError as exc:
        logger.error("Failed to check for new contacts: %s", exc)
        result.error = str(exc)
        return result

    if not contacts:
        logger.info("No unacknowledged contacts")
        return result

    sender = sender_factory(credentials)
    try:
        for index, contact in enumerate(contacts):
            if index:
                sleep(send_delay)
            logger.info("Contact %s is unacknowledged, notifying...", contact.name)
            result.attempted += 1
            try:
                sender.notify(contact)
            except NotificationError as exc:
                logger.error("Failed to send contact %s to staff: %s", contact, exc)
                result.failed.append(contact.id)
            else:
                result.sent.append(contact.id)
    finally:
        sender.close()

    logger.info(
        "Done sending contacts (%d sent, %d failed), returning to idle loop",
        len(result.sent),
        len(result.failed),
    )
    return result


def run_forever(
    engine: Engine,
    *,
    interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    stop_event: Optional[threading.Event] = None,
    cycle: Optional[Callable[[Engine], CycleResult]] = None,
    clock: Callable[[], float] = time.monotonic,
    max_cycles: Optional[int] = None,
) -> None:
    """Run poll cycles every ``interval`` seconds until stopped.

    The first cycle runs one interval after start.  The loop waits on
    ``stop_event`` rather than sleeping so a signal handler can end it
    between cycles; a cycle that has started always runs to completion.

    Parameters
    ----------
    engine : Engine
        Probed engine for the contacts database.
    interval : float
        Seconds between ticks.
    stop_event : threading.Event, optional
        Set to leave the loop.  A private event is used when omitted.
    cycle : callable, optional
        Replaces :func:`run_cycle`; receives the engine.
    clock : callable
        Monotonic clock in seconds.
    max_cycles : int, optional
        Stop after this many cycles.  ``None`` runs indefinitely.
    """
    stop = stop_event or threading.Event()
    run = cycle or run_cycle
    completed = 0
    next_tick = clock() + interval
    while not stop.is_set():
        if stop.wait(max(0.0, next_tick - clock())):
            break
        try:
            run(engine)
        except Exception:
            logger.exception("Poll cycle failed unexpectedly")
        completed += 1
        if max_cycles is not None and completed >= max_cycles:
            break
        # Coalesce ticks that elapsed while the cycle was running.
        now = clock()
        next_tick += interval
        if next_tick <= now:
            missed = int((now - next_tick) // interval) + 1
            next_tick += missed * interval
            logger.warning("Poll cycle overran the interval, skipped %d tick(s)", missed)
    logger.info("Poll loop stopped")
