from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .compare import compare_datasets
from .config import export_labels, excluded_fields, load_config, sort_options
from .errors import SheetDiffError
from .export_excel import write_workbook
from .ingest import load_dataset
from .models import ComparisonResult, Config, RowDifference
from .search import filter_results, sort_differences

LOGGER = logging.getLogger(__name__)


def build_results(config: Config, before_path: str, after_path: str) -> Tuple[ComparisonResult, List[RowDifference]]:
    before = load_dataset(before_path, config.get("sheet_before"))
    after = load_dataset(after_path, config.get("sheet_after"))
    result = compare_datasets(before, after, config.get("key_field") or "", excluded_fields(config))
    result = filter_results(result, config.get("search") or "")
    ordered = result.all_differences()
    sort = sort_options(config)
    if sort["field"]:
        ordered = sort_differences(ordered, sort["field"], sort["ascending"])
    return result, ordered


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    merged = dict(config)
    if args.key:
        merged["key_field"] = args.key
    if args.exclude:
        merged["excluded_fields"] = args.exclude
    if args.sheet_before:
        merged["sheet_before"] = args.sheet_before
    if args.sheet_after:
        merged["sheet_after"] = args.sheet_after
    if args.search is not None:
        merged["search"] = args.search
    if args.sort or args.descending:
        sort = dict(merged.get("sort") or {})
        if args.sort:
            sort["field"] = args.sort
        if args.descending:
            sort["ascending"] = False
        merged["sort"] = sort
    return merged


def run(argv: Optional[Iterable[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Compare two spreadsheet snapshots by a key column")
    parser.add_argument("--before", required=True, help="Earlier workbook (.xlsx or .csv)")
    parser.add_argument("--after", required=True, help="Later workbook (.xlsx or .csv)")
    parser.add_argument("--key", help="Column that identifies a record")
    parser.add_argument("--exclude", action="append", help="Column to ignore when detecting changes; can repeat")
    parser.add_argument("--sheet-before", help="Sheet to read from --before (default: first)")
    parser.add_argument("--sheet-after", help="Sheet to read from --after (default: first)")
    parser.add_argument("--search", help="Only keep records containing this text")
    parser.add_argument("--sort", help="Column to order results by")
    parser.add_argument("--descending", action="store_true")
    parser.add_argument("--config", help="YAML config (default: ./config.yaml if present)")
    parser.add_argument("--out", required=True)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="%(levelname)s %(name)s: %(message)s")
    try:
        config = apply_overrides(load_config(args.config), args)
        result, ordered = build_results(config, args.before, args.after)
        Path(args.out).parent.mkdir(parents=True, exist_ok=True)
        write_workbook(args.out, ordered, config["key_field"], export_labels(config))
    except SheetDiffError as exc:
        LOGGER.error("%s", exc)
        raise SystemExit(2) from exc

    LOGGER.info("Wrote %s (added=%d removed=%d changed=%d)", args.out, len(result.added), len(result.removed), len(result.changed))
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
