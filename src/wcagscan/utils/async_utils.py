"""Run CLI coroutines on a private event loop with clean driver shutdown."""

import asyncio
import gc
import signal
import sys
import threading
import warnings
from collections.abc import Coroutine
from typing import Any, TypeVar, cast

T = TypeVar("T")


def _cancel_all_tasks(loop: asyncio.AbstractEventLoop) -> None:
    """Cancel pending tasks and let them unwind."""
    tasks = asyncio.all_tasks(loop)
    for task in tasks:
        task.cancel()
    if tasks:
        loop.run_until_complete(asyncio.gather(*tasks, return_exceptions=True))


def _finalize_loop(loop: asyncio.AbstractEventLoop) -> None:
    """Shut down async generators and the default executor before closing."""
    for shutdown in (loop.shutdown_asyncgens, loop.shutdown_default_executor):
        try:
            loop.run_until_complete(shutdown())
        except RuntimeError as exc:
            warnings.warn(f"event loop shutdown step failed: {exc}", RuntimeWarning, stacklevel=2)


def _run_in_fresh_loop(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine in a new loop; SIGINT/SIGTERM cancel it gracefully."""
    if sys.platform == "win32":
        # The browser driver is a subprocess; Windows needs the Proactor loop.
        loop = asyncio.ProactorEventLoop()
    else:
        loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    install_signals = sys.platform != "win32" and threading.current_thread() is threading.main_thread()
    original_handlers: dict[int, Any] = {}
    interrupted = False

    def signal_handler(signum: int, frame: Any) -> None:
        nonlocal interrupted
        interrupted = True
        for task in asyncio.all_tasks(loop):
            task.cancel()

    if install_signals:
        for signum in (signal.SIGINT, signal.SIGTERM):
            original_handlers[signum] = signal.signal(signum, signal_handler)

    try:
        return loop.run_until_complete(coro)
    except asyncio.CancelledError:
        if interrupted:
            raise KeyboardInterrupt from None
        raise
    finally:
        try:
            _cancel_all_tasks(loop)
            _finalize_loop(loop)
        finally:
            # Collect driver transports while the loop can still close them.
            gc.collect()
            asyncio.set_event_loop(None)
            loop.close()
            for signum, handler in original_handlers.items():
                signal.signal(signum, handler)


def safe_async_run(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run a coroutine to completion from synchronous code.

    If an event loop is already running in this thread (e.g. pytest-asyncio),
    the coroutine is executed in a worker thread with its own event loop.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return _run_in_fresh_loop(coro)

    result: T | None = None
    error: BaseException | None = None

    def _runner() -> None:
        nonlocal result, error
        try:
            result = _run_in_fresh_loop(coro)
        except BaseException as exc:
            error = exc

    thread = threading.Thread(target=_runner, daemon=True)
    thread.start()
    thread.join()

    if error is not None:
        raise error
    return cast(T, result)
