# core/errors.py


class ToolkitError(Exception):
    pass


class ValidationError(ToolkitError):
    """Value outside its allowed domain. Raised before any side effect."""


class ResourceNotFoundError(ToolkitError):
    """Missing file, missing metadata, no matching files, browser not installed."""


class ExternalDependencyError(ToolkitError):
    """URL or OS API failed. The message names the failing input."""
