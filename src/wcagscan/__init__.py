"""wcagscan: WCAG accessibility scanning on top of a headless browser.

The engine lives in :mod:`wcagscan.modules.scanner`; ``app`` and ``main`` are
the Typer entry points and are imported lazily.
"""

__all__ = ["app", "main"]


def _quiet_closed_loop_transport() -> None:
    """Silence transport finalizers that run after the CLI's loop is gone.

    Playwright talks to its Node driver over a subprocess pipe. Each CLI
    command runs in a private event loop (``safe_async_run``) that is closed
    before the driver's ``BaseSubprocessTransport`` is garbage collected, so
    the transport's ``__del__`` raises "Event loop is closed" on exit.
    """
    from asyncio import base_subprocess

    transport_cls = base_subprocess.BaseSubprocessTransport
    finalize = transport_cls.__del__

    def __del__(self):
        try:
            finalize(self)
        except RuntimeError as exc:
            if "Event loop is closed" not in str(exc):
                raise

    transport_cls.__del__ = __del__


_quiet_closed_loop_transport()


def __getattr__(name: str):
    if name not in __all__:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    from wcagscan import cli

    return getattr(cli, name)


def __dir__() -> list[str]:
    return sorted(__all__)
