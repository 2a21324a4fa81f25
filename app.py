"""
app.py — Data Migration Scanner  (Streamlit UI)
Run:  python -m streamlit run app.py
"""
from __future__ import annotations
import datetime
import html
import json
from pathlib import Path

import streamlit as st

# ── page config (MUST be first Streamlit call) ──────────────────────────────
st.set_page_config(
    page_title="Data Migration Scanner",
    page_icon="🗂️",
    layout="wide",
    initial_sidebar_state="expanded",
)

from migscan.agents import InspectAgent, ScanAgent
from migscan.archive import MalformedArchive
from migscan.config import ConfigError, load_config, DEFAULT_MAX_SIZE_MB
from migscan.report import report_sheets
from migscan.writer import build_package

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# ── output folder ─────────────────────────────────────────────────────────────
OUTPUTS_DIR = Path("Outputs")
OUTPUTS_DIR.mkdir(exist_ok=True)

# ── CSS theme ────────────────────────────────────────────────────────────────
st.markdown("""
<style>
  [data-testid="stSidebar"] { background:#0d1117; }
  .main-header {
    background: linear-gradient(90deg,#0e2f4c 0%,#1a4a7a 100%);
    padding:18px 28px; border-radius:8px; margin-bottom:18px; color:#ffffff;
  }
  .main-header h1 { margin:0; font-size:1.7rem; letter-spacing:.5px; }
  .main-header p  { margin:4px 0 0; font-size:.9rem; opacity:.85; }
  .upload-card { border-left:3px solid #4a9ede; padding:4px 10px; margin:4px 0;
                 font-size:.80rem; word-break:break-all; color:#ddd; }
  .upload-card small { color:#888; }
</style>
""", unsafe_allow_html=True)

# ── header ───────────────────────────────────────────────────────────────────
st.markdown("""
<div class="main-header">
  <h1>🗂️ Data Migration Scanner</h1>
  <p>File inventory · Migration blockers · DOCX/XLSX metadata · Excel report</p>
</div>
""", unsafe_allow_html=True)

# ── helpers ──────────────────────────────────────────────────────────────────
def _upload_card(name: str, size: int) -> str:
    kb = size / 1024
    return f'<div class="upload-card">{html.escape(name)}<br><small>{kb:,.1f} KB</small></div>'

_inspect = InspectAgent()
_scan = ScanAgent()

# ── sidebar: scan settings ───────────────────────────────────────────────────
with st.sidebar:
    st.markdown("### 📂 Scan Settings")
    source_dir = st.text_input("Source directory")
    max_size_mb = st.number_input("Max size (MB)", min_value=0, value=DEFAULT_MAX_SIZE_MB, step=10)
    st.markdown("---")
    st.markdown("### 📄 Inspect Files")
    uploads = st.file_uploader("DOCX / XLSX files", type=["docx", "xlsx"],
                               accept_multiple_files=True, key="uploads")
    for up in uploads or []:
        st.markdown(_upload_card(up.name, up.size), unsafe_allow_html=True)

tabs = st.tabs(["🔎 Directory Scan", "📄 File Inspection"])

# ═══════════════════════════════════════════════════════════════════════
# TAB 1: DIRECTORY SCAN
# ═══════════════════════════════════════════════════════════════════════
with tabs[0]:
    with st.expander("ℹ️  How this tab works", expanded=False):
        st.markdown("""
**Directory Scan** walks every file below the source directory and flags:

- paths longer than 250 characters
- names containing any of `< > : " / \\ | ? *`
- files larger than the size threshold
- password-protected / encrypted DOCX and XLSX files

DOCX page count and author and XLSX sheet count are recorded as well.
The report workbook has a **File Inventory** and a **Summary** sheet.
        """)

    if st.button("Run scan", type="primary", disabled=not source_dir):
        try:
            cfg = load_config(source_dir, int(max_size_mb))
        except ConfigError as e:
            st.error(f"Configuration error: {e}")
            st.stop()

        with st.spinner("Scanning…"):
            result = _scan.run(cfg)
        summary = result.summary()

        c1, c2, c3 = st.columns(3)
        c1.metric("Files scanned", f"{summary.total_files:,}")
        c2.metric("Total size", f"{summary.total_size_mb:.2f} MB")
        c3.metric("Files with issues", summary.files_with_issues)

        st.markdown("#### Files by type")
        st.dataframe([{"Type": k, "Count": v} for k, v in summary.count_by_type.items()],
                     use_container_width=True)

        flagged = [r for r in result.records if r.has_issues]
        with st.expander(f"{'❌' if flagged else '✅'} Flagged files ({len(flagged)})",
                         expanded=bool(flagged)):
            if flagged:
                st.dataframe([{"Path": r.path, "Issues": "; ".join(r.issues)} for r in flagged],
                             use_container_width=True)
            else:
                st.success("No findings.")

        report_bytes = build_package(report_sheets(result.records, summary))
        ts = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
        report_name = f"scan-report_{ts}.xlsx"
        (OUTPUTS_DIR / report_name).write_bytes(report_bytes)
        st.success(f"Report saved → {OUTPUTS_DIR / report_name}")
        st.download_button(
            "⬇️ Download scan report .xlsx",
            report_bytes,
            file_name=report_name,
            mime=XLSX_MIME,
            key="dl_report",
        )

# ═══════════════════════════════════════════════════════════════════════
# TAB 2: FILE INSPECTION
# ═══════════════════════════════════════════════════════════════════════
with tabs[1]:
    if not uploads:
        st.info("Upload one or more **.docx / .xlsx** files in the sidebar to inspect them.")
    for up in uploads or []:
        with st.expander(f"📄 {up.name}", expanded=True):
            try:
                res = _inspect.run(up.name, data=up.getvalue())
            except MalformedArchive as e:
                st.error(f"Not an OOXML package (encrypted files are often OLE containers): {e}")
                continue
            info = res["inspection"] or {}
            if info.get("encrypted"):
                st.warning("Password-protected or encrypted")
            st.code(json.dumps(res, indent=2), language="json")
