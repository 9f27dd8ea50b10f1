# Reconciliation Errors
# Only invalid arguments and an unavailable row source propagate to callers;
# bad field values are defaulted by the normalizer.


class DiscrepancyError(Exception):
    """Base class for errors raised by the discrepancy analyser."""


class InvalidQueryError(DiscrepancyError, ValueError):
    """A query argument was rejected before the snapshot was touched."""


class SourceUnavailableError(DiscrepancyError):
    """The bulk row source could not be queried. The previous snapshot is kept."""
