from __future__ import annotations


class PortPeekError(Exception):
    """
    Base for failures surfaced to callers.
    `message` is a complete sentence meant to be shown as-is.
    """

    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"ok": False, "kind": self.kind, "message": self.message}


class ExecutionError(PortPeekError):
    """The external tool could not be launched."""

    kind = "execution_error"


class ToolFailure(PortPeekError):
    """The tool ran but exited non-zero."""

    kind = "tool_failure"


class TerminationFailure(PortPeekError):
    kind = "termination_failure"


class UnsupportedPlatform(PortPeekError):
    kind = "unsupported_platform"

    def __init__(self, message: str = "Unsupported platform") -> None:
        super().__init__(message)


class InvalidProcessId(PortPeekError):
    """Non-positive pids would signal process groups."""

    kind = "invalid_pid"
