from .compare import common_fields, compare_datasets, dataset_fields
from .diff_rows import diff_rows
from .errors import ConfigurationError, IngestError, SheetDiffError
from .index import KeyIndex, build_key_index
from .models import ComparisonResult, FieldDifference, RowDifference
from .normalize import normalize_value
from .search import filter_results, sort_differences

__all__ = [
    "ComparisonResult",
    "ConfigurationError",
    "FieldDifference",
    "IngestError",
    "KeyIndex",
    "RowDifference",
    "SheetDiffError",
    "build_key_index",
    "common_fields",
    "compare_datasets",
    "dataset_fields",
    "diff_rows",
    "filter_results",
    "normalize_value",
    "sort_differences",
]
