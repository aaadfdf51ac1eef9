"""API routes for rollmark."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import BaseModel

from ..config import settings
from ..errors import ApplyRefusedError, RollmarkError
from ..grid import WorkbookGrid
from ..ops import EditorSession

logger = logging.getLogger(__name__)

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def get_sessions():
    """Get the global session cache."""
    from .app import get_sessions as _get_sessions

    return _get_sessions()


def get_session(session_id: str) -> EditorSession:
    session = get_sessions().get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Workbook session not found or expired")
    return session


def _http_error(e: RollmarkError) -> HTTPException:
    if isinstance(e, ApplyRefusedError):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


class PreviewRequest(BaseModel):
    """Request to build a preview from pasted text."""

    column_key: str
    task: str = "attendance"
    text: str


class FixRequest(BaseModel):
    """Request to point a preview row at a chosen grid row."""

    sheet: str
    row: int


class DiscardRequest(BaseModel):
    """Request to discard (or restore) a preview row."""

    discarded: bool = True


class GradeRequest(BaseModel):
    """Request to edit the grade written for a preview row."""

    value: str


class ApplyRequest(BaseModel):
    """Request to apply the current preview."""

    confirmation: bool = False
    highlight: Optional[bool] = None
    highlight_color: Optional[str] = None


@router.get("/health")
async def health_check():
    """Health check endpoint with diagnostics."""
    return {
        "status": "ok",
        "service": "rollmark",
        "config": {
            "section_marker": settings.section_marker,
            "lecture_marker": settings.lecture_marker,
            "highlight_enabled": settings.highlight_enabled,
            "highlight_color": settings.highlight_color,
            "session_ttl_seconds": settings.session_ttl_seconds,
        },
        "sessions": get_sessions().size(),
    }


# Workbook sessions


@router.post("/workbooks")
async def upload_workbook(request: Request, sheet: Optional[str] = None):
    """
    Load an .xlsx workbook sent as the raw request body.

    Query parameters:
    - sheet: Restrict every operation to one sheet (default: all sheets)
    """
    data = await request.body()
    if not data:
        raise HTTPException(status_code=400, detail="Request body is empty")
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="Workbook is too large")

    try:
        grid = WorkbookGrid.from_bytes(data)
        session = EditorSession(grid, sheet)
    except RollmarkError as e:
        raise _http_error(e)

    sessions = get_sessions()
    sessions.cleanup_expired()
    sessions.store(session)
    logger.info(f"Loaded workbook session {session.session_id} ({len(data)} bytes)")
    return session.describe()


@router.get("/workbooks/{session_id}/columns")
async def list_columns(session_id: str):
    """List the selectable target columns, grouped by area kind."""
    session = get_session(session_id)
    try:
        options = session.list_columns()
    except RollmarkError as e:
        raise _http_error(e)
    return {"columns": [o.model_dump(mode="json") for o in options]}


@router.post("/workbooks/{session_id}/preview")
async def build_preview(session_id: str, request: PreviewRequest):
    """
    Build a preview of every prospective write. Nothing is written.

    Returns:
    - One row per input id with its match status
    - A summary with counts and duplicate ids
    """
    session = get_session(session_id)
    try:
        preview = session.build_preview(request.column_key, request.task, request.text)
    except RollmarkError as e:
        raise _http_error(e)
    return {
        "preview": preview.model_dump(mode="json"),
        "summary": preview.summary().model_dump(mode="json"),
    }


@router.get("/workbooks/{session_id}/students")
async def search_students(session_id: str, q: str = "", limit: Optional[int] = None):
    """Search students by id or name for manual fixes."""
    session = get_session(session_id)
    try:
        rows = session.search_students(q, limit)
    except RollmarkError as e:
        raise _http_error(e)
    return {"students": [r.model_dump(mode="json") for r in rows]}


@router.post("/workbooks/{session_id}/rows/{seq}/fix")
async def fix_row(session_id: str, seq: int, request: FixRequest):
    """Point a preview row at a grid row chosen by the user."""
    session = get_session(session_id)
    try:
        row = session.fix_row(seq, request.sheet, request.row)
    except RollmarkError as e:
        raise _http_error(e)
    return row.model_dump(mode="json")


@router.post("/workbooks/{session_id}/rows/{seq}/wrong")
async def mark_wrong(session_id: str, seq: int):
    """Flag a match as wrong."""
    session = get_session(session_id)
    try:
        row = session.mark_wrong(seq)
    except RollmarkError as e:
        raise _http_error(e)
    return row.model_dump(mode="json")


@router.post("/workbooks/{session_id}/rows/{seq}/discard")
async def discard_row(session_id: str, seq: int, request: Optional[DiscardRequest] = None):
    """Exclude a preview row from the apply batch (or restore it)."""
    session = get_session(session_id)
    discarded = request.discarded if request is not None else True
    try:
        row = session.discard(seq, discarded)
    except RollmarkError as e:
        raise _http_error(e)
    return row.model_dump(mode="json")


@router.post("/workbooks/{session_id}/rows/{seq}/grade")
async def edit_grade(session_id: str, seq: int, request: GradeRequest):
    """Edit the grade written for a preview row."""
    session = get_session(session_id)
    try:
        row = session.edit_grade(seq, request.value)
    except RollmarkError as e:
        raise _http_error(e)
    return row.model_dump(mode="json")


@router.post("/workbooks/{session_id}/apply")
async def apply_preview(session_id: str, request: ApplyRequest):
    """
    Apply the current preview.

    Requires confirmation=true. A preview can be applied once.
    """
    session = get_session(session_id)
    try:
        result = session.apply(
            confirmation=request.confirmation,
            highlight=request.highlight,
            highlight_color=request.highlight_color,
        )
    except RollmarkError as e:
        raise _http_error(e)
    return result.model_dump(mode="json")


@router.get("/workbooks/{session_id}/download")
async def download_workbook(session_id: str):
    """Download the (possibly edited) workbook."""
    session = get_session(session_id)
    return Response(
        content=session.export(),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="rollmark.xlsx"'},
    )


@router.delete("/workbooks/{session_id}")
async def close_workbook(session_id: str):
    """Drop a workbook session."""
    if not get_sessions().remove(session_id):
        raise HTTPException(status_code=404, detail="Workbook session not found or expired")
    return {"success": True}
