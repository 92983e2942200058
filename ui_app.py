import io
import logging

import streamlit as st

from sheetdiff.compare import common_fields, compare_datasets, dataset_fields
from sheetdiff.config import export_labels, load_config
from sheetdiff.errors import SheetDiffError
from sheetdiff.export_excel import write_workbook
from sheetdiff.ingest import read_upload, sheet_dataset
from sheetdiff.normalize import display_text
from sheetdiff.search import filter_results, sort_differences

st.set_page_config(page_title="SheetDiff", layout="wide")

DEFAULTS = {
    "result": None,
    "key_field": "",
    "log_output": "",
}

for key, default in DEFAULTS.items():
    st.session_state.setdefault(key, default)


st.title("SheetDiff - Spreadsheet Snapshot Compare")
st.write("Upload two exports of the same table to see which records were added, removed or changed.")


def _load_upload(label: str, slot: str):
    upload = st.file_uploader(label, type=["xlsx", "xlsm", "csv"], key=f"upload_{slot}")
    if upload is None:
        return None
    try:
        sheets = read_upload(upload.getvalue(), upload.name)
        sheet = st.selectbox(f"Sheet ({upload.name})", options=list(sheets), key=f"sheet_{slot}")
        return sheet_dataset(sheets, sheet, upload.name)
    except SheetDiffError as exc:
        st.error(str(exc))
        return None


with st.sidebar:
    st.header("Inputs")
    before = _load_upload("Earlier snapshot", "before")
    after = _load_upload("Later snapshot", "after")
    log_level = st.selectbox("Log level", options=["INFO", "DEBUG", "WARNING", "ERROR"], index=0)

config = load_config()

if before is not None and after is not None:
    candidates = common_fields(before, after) or sorted(set(dataset_fields(before)) | set(dataset_fields(after)))
    default_key = config.get("key_field")
    key_field = st.selectbox(
        "Key column",
        options=candidates,
        index=candidates.index(default_key) if default_key in candidates else 0,
    )
    excluded = st.multiselect(
        "Columns ignored when detecting changes",
        options=[c for c in candidates if c != key_field],
        default=[c for c in (config.get("excluded_fields") or []) if c in candidates and c != key_field],
    )

    if st.button("Compare"):
        handler = logging.StreamHandler(stream=io.StringIO())
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        root_logger = logging.getLogger()
        root_logger.addHandler(handler)
        root_logger.setLevel(getattr(logging, log_level, logging.INFO))
        try:
            st.session_state["result"] = compare_datasets(before, after, key_field, excluded)
            st.session_state["key_field"] = key_field
        except SheetDiffError as exc:
            st.error(str(exc))
        finally:
            handler.flush()
            st.session_state["log_output"] = handler.stream.getvalue()
            root_logger.removeHandler(handler)
else:
    st.info("Upload both snapshots to choose a key column.")

result = st.session_state.get("result")
if result is not None:
    key_field = st.session_state["key_field"]
    search = st.text_input("Search", placeholder="Key or any cell value")
    shown = filter_results(result, search)

    counts = shown.counts()
    for column, name in zip(st.columns(4), ["total", "added", "removed", "changed"]):
        column.metric(name.title(), counts[name])
    if result.duplicate_keys:
        st.warning(f"Duplicate keys (last row kept): {', '.join(result.duplicate_keys[:20])}")

    sort_col, dir_col = st.columns([4, 1])
    columns = [key_field] + [c for c in dataset_fields([d.display_row for d in shown.all_differences()]) if c != key_field]
    sort_field = sort_col.selectbox("Sort by", options=[""] + columns)
    ascending = dir_col.radio("Order", options=["Ascending", "Descending"]) == "Ascending"

    ordered = shown.all_differences()
    if sort_field:
        ordered = sort_differences(ordered, sort_field, ascending)

    table = []
    for diff in ordered:
        row = diff.display_row
        record = {"Status": diff.category, key_field: diff.key}
        for name in columns[1:]:
            change = diff.field_differences.get(name)
            if change is not None:
                record[name] = f"{display_text(change.before)} → {display_text(change.after)}"
            else:
                record[name] = display_text(row.get(name))
        table.append(record)

    if table:
        st.dataframe(table, use_container_width=True, height=500)
        buffer = io.BytesIO()
        write_workbook(buffer, ordered, key_field, export_labels(config))
        st.download_button(
            "Export to Excel",
            data=buffer.getvalue(),
            file_name="comparison-results.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
    else:
        st.success("No differences to show.")

st.subheader("Console Output")
st.text_area("Logs", value=st.session_state.get("log_output", ""), height=160)
