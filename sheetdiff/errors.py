from __future__ import annotations


class SheetDiffError(Exception):
    """Base class for errors raised by sheetdiff."""


class ConfigurationError(SheetDiffError):
    """Key field or config file is unusable."""


class IngestError(SheetDiffError):
    """A workbook could not be read into a dataset."""
