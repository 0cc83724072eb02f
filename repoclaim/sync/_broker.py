"""Dramatiq broker setup for the background synchronisation actor.

A broker must exist before ``@dramatiq.actor`` registers
:func:`repoclaim.sync.jobs.sync_owner_job` and again whenever a worker runs
it. Outside tests, a missing broker is a deployment error unless
``REPOCLAIM_ALLOW_STUB_BROKER`` opts in to the in-memory stub.
"""

from __future__ import annotations

import os
import sys
import threading

import dramatiq
from dramatiq.brokers.stub import StubBroker

ALLOW_STUB_BROKER_ENV = "REPOCLAIM_ALLOW_STUB_BROKER"

_BROKER_LOCK = threading.Lock()
_broker_configured = False


def _is_running_tests() -> bool:
    """Return True when the process is a pytest run or an xdist worker."""
    return "pytest" in sys.modules or any(
        key in os.environ
        for key in ["PYTEST_CURRENT_TEST", "PYTEST_XDIST_WORKER", "PYTEST_ADDOPTS"]
    )


def _should_use_stub_broker() -> bool:
    """Return True when a StubBroker may stand in for a missing broker."""
    allow_stub = os.environ.get(ALLOW_STUB_BROKER_ENV, "")
    return allow_stub.strip().lower() in {"1", "true", "yes"} or _is_running_tests()


def ensure_broker_configured() -> None:
    """Ensure a Dramatiq broker is configured.

    Idempotent and safe to call from several worker threads at once.

    Raises
    ------
    RuntimeError
        If no broker can be obtained and the stub broker is not allowed.

    """
    global _broker_configured  # noqa: PLW0603 - process-wide sentinel

    if _broker_configured:
        return

    with _BROKER_LOCK:
        if _broker_configured:
            return

        try:
            current_broker = dramatiq.get_broker()
        except (ImportError, LookupError):
            # ImportError: the default RabbitMQ broker's client is not installed
            current_broker = None

        if current_broker is None:
            if not _should_use_stub_broker():
                message = (
                    "No Dramatiq broker configured. "
                    f"Set {ALLOW_STUB_BROKER_ENV}=1 for local or test runs "
                    "or configure a real broker."
                )
                raise RuntimeError(message)
            dramatiq.set_broker(StubBroker())

        _broker_configured = True
