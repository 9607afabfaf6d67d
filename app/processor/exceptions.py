class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class FileReadError(ProcessorError):
    """Raised when an uploaded petition file cannot be read from disk."""


class PipelineStateError(ProcessorError):
    """Raised when a step runs before the data it needs was produced."""
