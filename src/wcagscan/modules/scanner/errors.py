"""Exception types raised by the scan orchestration engine."""


class ScanError(RuntimeError):
    """Base class for failures inside a scan session."""


class BrowserLaunchError(ScanError):
    """The browser process could not be started."""


class NavigationError(ScanError):
    """The target page did not load successfully."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class LoginError(ScanError):
    """The login form could not be reached or submitted."""


class RuleEngineUnavailableError(ScanError):
    """Every rule engine source, including the built-in rule set, failed."""


class EvaluationError(ScanError):
    """The rule engine raised while running inside the page."""


class RequestValidationError(ValueError):
    """A scan request was rejected at the boundary."""
