"""Error taxonomy for dbdiff.

Every failure surfaced by the core derives from :class:`DiffError`, so
frontends can catch a single exception kind. Adapters wrap driver-specific
errors into :class:`MetadataUnavailable` and keep the original exception as
``__cause__``.
"""


class DiffError(RuntimeError):
    """Base class for all dbdiff failures."""


class MetadataUnavailable(DiffError):
    """Raised when catalogs, schemas, tables or columns cannot be enumerated."""


class ComparisonPreconditionError(DiffError, ValueError):
    """Raised when a diff is built with fewer than two participants."""


class SnapshotFormatError(DiffError):
    """Raised when a snapshot stream is truncated or malformed."""


class SourceError(DiffError, ValueError):
    """Raised for unusable source specifications or unknown catalogs/schemas."""
