# error taxonomy for the assistant core
# NOTE: only InputError, TransportError (incl. timeouts), MissingCredentialError and AnswerInProgressError are fatal to a turn.
# every ToolError is absorbed into a failed ToolResult by the dispatcher.

class AssistantError(Exception):
    """Base class for all assistant errors."""

class InputError(AssistantError):
    """User input was rejected before orchestration started (e.g. blank query)."""

class TransportError(AssistantError):
    """The model call itself failed (network, auth, provider error)."""

class AnswerTimeoutError(TransportError):
    """The caller-supplied timeout elapsed before the turn finished. Nothing is committed to memory."""

class MissingCredentialError(AssistantError):
    """The hosted model cannot be used because no API key is configured."""

class AnswerInProgressError(AssistantError):
    """Another answer is already in flight for this session."""

# =====================================================================
# Tool-level errors (never fatal to the turn)
# =====================================================================

class ToolError(AssistantError):
    """Base class for failures isolated to a single tool call."""

class UnknownToolError(ToolError):
    """The model requested a tool name that is not registered."""

class ToolArgumentError(ToolError):
    """A required tool argument was missing or could not be coerced."""

class ToolExecutionError(ToolError):
    """The tool handler failed while executing."""

class ActionLaunchError(ToolExecutionError):
    """The host platform refused to launch a device action."""

class PermissionDeniedError(ActionLaunchError):
    """The device has not granted the permission the action needs."""

class NoMatchingActivityError(ActionLaunchError):
    """No installed application can handle the action."""
