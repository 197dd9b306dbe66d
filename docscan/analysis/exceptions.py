class AnalysisFailureError(Exception):
    """Raised when an analysis engine call fails. The caller may retry."""


class AnalysisNetworkError(AnalysisFailureError):
    """Raised when the engine call fails due to network/infrastructure issues."""


class AnalysisSupersededError(AnalysisFailureError):
    """Raised for an analysis call cancelled by a newer call on the same analyzer."""
