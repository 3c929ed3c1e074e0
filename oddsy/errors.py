"""
Exception hierarchy for Oddsy.

Tool-level failures (bad arguments, upstream outages, unknown tools) are
recovered inside the loop and reported to the model as error results.
Only the run-level failures below ever reach the caller.
"""


class OddsyError(Exception):
    """Base exception for all Oddsy errors."""


class ToolArgumentError(OddsyError):
    """Tool arguments were missing, malformed, or failed normalization."""


class UpstreamError(OddsyError):
    """An upstream HTTP API failed after all retry attempts."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidRequestError(OddsyError):
    """The caller-supplied conversation history is unusable."""


class ModelCallError(OddsyError):
    """The orchestrator model endpoint could not be reached or answered badly."""


class FatalContractViolation(OddsyError):
    """The model invoked the terminal tool with arguments that do not parse.

    This aborts the run: there is no retry and no downgrade to a plain
    answer.
    """

    def __init__(self, tool_name: str, reason: str, raw_arguments: str = ""):
        super().__init__(f"Terminal tool '{tool_name}' called with invalid arguments: {reason}")
        self.tool_name = tool_name
        self.reason = reason
        self.raw_arguments = raw_arguments
