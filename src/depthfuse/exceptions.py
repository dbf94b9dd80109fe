"""Error hierarchy for depth-color fusion runs.

Everything raised on purpose derives from ``PipelineError`` so the CLI can
turn it into a non-zero exit status.
"""


class PipelineError(Exception):
    """Root of every fusion failure raised by depthfuse."""


class ConfigurationError(PipelineError):
    """An option such as the output format names something unsupported."""


class FileSystemError(PipelineError):
    """Reading or writing a file or directory failed."""


class InvalidInputRootError(FileSystemError):
    """The base directory of view images is missing or not a directory."""


class DataValidationError(PipelineError):
    """Arrays handed between stages have the wrong shape or length."""


class ViewLoadError(PipelineError):
    """One view image of a frame is unusable; the frame carries on without it."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class MissingViewFileError(ViewLoadError):
    """The view image file does not exist."""


class DecodeFailureError(ViewLoadError):
    """The view image file exists but could not be decoded."""
