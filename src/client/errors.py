"""
Client-side failure kinds.

Every failure the data pipeline can hit while loading markers is one of these.
They are caught at the controller boundary and turned into a single
human-readable message; none of them reach the renderer.
"""


class MarkerPipelineError(Exception):
    """Base class for marker loading failures."""


class ParseFailure(MarkerPipelineError):
    """Response body is not well-formed JSON or not shaped as an envelope."""


class UpstreamFailure(MarkerPipelineError):
    """Network failure or non-success status from the marker source."""


class DomainFailure(MarkerPipelineError):
    """Envelope was well-formed but reported ``success: false``."""
