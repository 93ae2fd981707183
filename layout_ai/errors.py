"""layout_ai.errors

Central error types to keep error handling consistent.

Nothing here is fatal to the process: extractor errors are recovered by falling back to the
rule-based strategy, and pipeline errors are turned into a `success=False` response.
"""

class AppError(Exception):
    """Base application error."""

class ConfigError(AppError):
    """Raised when required configuration is missing or invalid."""

class ToolError(AppError):
    """Raised when an external tool call fails (LLM, store)."""

class LLMOutputError(AppError):
    """Raised when the LLM output cannot be parsed/validated."""

class ExtractorUnavailable(AppError):
    """The remote intent strategy is disabled, errored or timed out."""

class FeedbackError(AppError):
    """Raised when explicit feedback is out of range or incomplete."""

class PipelineFailure(AppError):
    """Unexpected failure inside the composed recommendation pipeline."""
