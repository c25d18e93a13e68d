"""Streamlit UI 컴포넌트"""
from __future__ import annotations

import asyncio

import pandas as pd
import streamlit as st

from client.manager.controller import FileManager
from client.manager.state import NotificationType, UploadProgress, UploadStatus
from client.models.schemas import CATEGORY_INFO, Category, SelectedFile, UploadedFile
from client.tools.display import PreviewKind, format_date, format_file_size, preview_kind
from client.tools.validation import ACCEPTED_EXTENSIONS


# ---------------------------------------------------------------------------
# 세션 상태 초기화
# ---------------------------------------------------------------------------

def init_session() -> FileManager:
    if "manager" not in st.session_state:
        st.session_state.manager = FileManager()
        asyncio.run(st.session_state.manager.load_files())
    if "uploader_key" not in st.session_state:
        st.session_state.uploader_key = 0
    if "preview_file" not in st.session_state:
        st.session_state.preview_file = None

    manager: FileManager = st.session_state.manager
    manager.tick()
    return manager


# ---------------------------------------------------------------------------
# 헤더: 총 문서 수 + 새로고침
# ---------------------------------------------------------------------------

def render_header(manager: FileManager):
    state = manager.state
    col_title, col_refresh, col_total = st.columns([6, 1, 2])
    with col_title:
        st.title("VISA Dossier Management")
        st.caption("Upload and manage your documents")
    with col_refresh:
        if st.button("↻", help="Refresh files", disabled=state.is_loading):
            asyncio.run(manager.load_files())
            st.rerun()
    with col_total:
        st.metric("Total uploaded", "Loading..." if state.is_loading else f"{state.total_files} Documents")


# ---------------------------------------------------------------------------
# 업로드 폼
# ---------------------------------------------------------------------------

def _draw_progress(placeholder, entries: list[UploadProgress]):
    with placeholder.container():
        for entry in entries:
            icon = {UploadStatus.SUCCESS: "✅", UploadStatus.ERROR: "⚠️"}.get(entry.status, "⏳")
            st.progress(entry.progress / 100, text=f"{icon} {entry.file_name} ({entry.progress}%)")


def render_upload_form(manager: FileManager):
    state = manager.state
    st.subheader("Upload Documents")

    category = st.selectbox(
        "Document Category",
        list(Category),
        format_func=lambda c: CATEGORY_INFO[c][0],
        disabled=state.is_uploading or state.is_loading,
    )
    picked = st.file_uploader(
        "Supports PDF, PNG, JPG files up to 4MB",
        type=list(ACCEPTED_EXTENSIONS),
        accept_multiple_files=True,
        key=f"uploader_{st.session_state.uploader_key}",
        disabled=state.is_uploading or state.is_loading,
    )

    if state.validation_error:
        st.error(state.validation_error)

    # 업로드 중에만 사용하는 자리; 이후 상태는 render_upload_progress가 그린다
    progress_area = st.empty()

    if st.button("Upload", type="primary", disabled=not picked or state.is_uploading, use_container_width=True):
        selected = [
            SelectedFile(name=f.name, content_type=f.type or "application/octet-stream", content=f.getvalue())
            for f in picked
        ]
        manager.on_change = lambda s: _draw_progress(progress_area, s.upload_progress)
        try:
            uploaded = asyncio.run(manager.upload_files(selected, category))
        finally:
            manager.on_change = None
        if uploaded or not manager.state.validation_error:
            st.session_state.uploader_key += 1
        st.rerun()


def render_quick_stats(manager: FileManager):
    st.subheader("Quick Stats")
    df = pd.DataFrame(
        [{"Category": group.label, "Files": len(group.files)} for group in manager.state.files.values()]
    )
    st.dataframe(df, hide_index=True, use_container_width=True)


# ---------------------------------------------------------------------------
# 카테고리별 파일 목록
# ---------------------------------------------------------------------------

def _render_file_row(manager: FileManager, file: UploadedFile):
    icon = "🖼️" if preview_kind(file.type) is PreviewKind.IMAGE else "📄"
    c_name, c_preview, c_open, c_delete = st.columns([7, 1, 1, 2])
    with c_name:
        st.markdown(f"{icon} **{file.name}**")
        st.caption(f"{format_file_size(file.size)} · {format_date(file.uploaded_at)}")
    with c_preview:
        if st.button("👁", key=f"preview_{file.id}", help="Preview file"):
            st.session_state.preview_file = file
            st.rerun()
    with c_open:
        if file.url:
            st.link_button("⬇", file.url, help="Download file")
    with c_delete:
        pending = manager.is_pending_delete(file.id)
        label = "Click again to confirm" if pending else "🗑"
        if st.button(label, key=f"delete_{file.id}", help="Delete file", type="primary" if pending else "secondary"):
            if asyncio.run(manager.click_delete(file.id)):
                preview = st.session_state.preview_file
                if preview is not None and preview.id == file.id:
                    st.session_state.preview_file = None
            st.rerun()


def render_file_list(manager: FileManager):
    if manager.state.is_loading:
        st.info("Loading...")
        return

    for group in manager.state.files.values():
        with st.container(border=True):
            col_label, col_count = st.columns([4, 1])
            with col_label:
                st.subheader(group.label)
                st.caption(group.description)
            with col_count:
                count = len(group.files)
                st.write(f"{count} {'file' if count == 1 else 'files'}")

            if not group.files:
                st.caption("No files uploaded yet")
                continue
            for file in group.files:
                _render_file_row(manager, file)


# ---------------------------------------------------------------------------
# 미리보기
# ---------------------------------------------------------------------------

def render_preview():
    file: UploadedFile | None = st.session_state.preview_file
    if file is None:
        return

    with st.container(border=True):
        col_title, col_download, col_close = st.columns([7, 1, 1])
        with col_title:
            st.subheader(file.name)
            st.caption(f"{format_file_size(file.size)} · Uploaded {format_date(file.uploaded_at, long=True)}")
        with col_download:
            if file.url:
                st.link_button("⬇", file.url, help="Download file")
        with col_close:
            if st.button("✕", key="close_preview", help="Close preview"):
                st.session_state.preview_file = None
                st.rerun()

        match preview_kind(file.type):
            case PreviewKind.IMAGE if file.url:
                st.image(file.url, caption=file.name)
            case PreviewKind.PDF:
                st.markdown("**PDF Document**")
                st.caption("Preview not available for PDF files")
                if file.url:
                    st.link_button("Open PDF", file.url)
            case _:
                st.markdown("**File Preview**")
                st.caption("Preview not available for this file type")
                if file.url:
                    st.link_button("Open File", file.url)


# ---------------------------------------------------------------------------
# 알림 (1초마다 만료 처리)
# ---------------------------------------------------------------------------

@st.fragment(run_every="1s")
def render_notifications(manager: FileManager):
    manager.tick()
    for notification in list(manager.state.notifications):
        col_msg, col_close = st.columns([10, 1])
        with col_msg:
            if notification.type is NotificationType.SUCCESS:
                st.success(notification.message)
            else:
                st.error(notification.message)
        with col_close:
            if st.button("✕", key=f"dismiss_{notification.id}"):
                manager.remove_notification(notification.id)
                st.rerun(scope="fragment")


@st.fragment(run_every="1s")
def render_upload_progress(manager: FileManager):
    manager.tick()
    if manager.state.upload_progress:
        _draw_progress(st.empty(), manager.state.upload_progress)
