"""VISA Dossier Management – Streamlit 엔트리포인트"""

from dotenv import load_dotenv

load_dotenv()

import streamlit as st

from ui.app import (
    init_session,
    render_file_list,
    render_header,
    render_notifications,
    render_preview,
    render_quick_stats,
    render_upload_form,
    render_upload_progress,
)

st.set_page_config(
    page_title="VISA Dossier Management",
    page_icon="🛡️",
    layout="wide",
)

manager = init_session()

render_header(manager)
render_notifications(manager)

col_upload, col_files = st.columns([1, 2], gap="large")

# 업로드 폼 + 통계
with col_upload:
    render_upload_form(manager)
    render_upload_progress(manager)
    render_quick_stats(manager)

# 카테고리별 목록 + 미리보기
with col_files:
    render_preview()
    render_file_list(manager)
