class AnalysisError(Exception):
    """Base exception for the extraction-and-reconciliation pipeline."""


class AnalysisCancelledError(AnalysisError):
    """Raised at a suspension point once the batch has been cancelled."""
