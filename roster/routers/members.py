from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from roster.core import csrf
from roster.core.errors import ImageReadError, MemberNotFoundError
from roster.services.editor_service import MemberEditor

router = APIRouter(prefix="", tags=["members"])


def _templates(request: Request) -> Jinja2Templates:
    tpl = getattr(getattr(request.app, "state", None), "templates", None)
    if tpl:
        return tpl
    raise RuntimeError("Templates not configured")


def _editor(request: Request) -> MemberEditor:
    editor = getattr(getattr(request.app, "state", None), "editor", None)
    if not editor:
        raise RuntimeError("MemberEditor not configured")
    return editor


def _lock(request: Request) -> asyncio.Lock:
    state = request.app.state
    lock = getattr(state, "editor_lock", None)
    if lock is None:
        lock = asyncio.Lock()
        state.editor_lock = lock
    return lock


def _upload_or_none(upload: UploadFile | None) -> UploadFile | None:
    if upload and upload.filename:
        return upload
    return None


def _home() -> RedirectResponse:
    return RedirectResponse("/", status_code=303)


def _render_index(request: Request, status_code: int = 200) -> HTMLResponse:
    """Render form + list; call with the editor lock held."""
    editor = _editor(request)
    token = csrf.page_token(request)
    # alerts are shown once
    alert, editor.alert = editor.alert, None
    context = {
        "members": editor.store.list(),
        "editor": editor,
        "draft": editor.draft,
        "errors": editor.errors,
        "alert": alert,
        "editing_member": editor.editing_member(),
        "csrf_token": token,
    }
    response = _templates(request).TemplateResponse(request, "index.html", context, status_code=status_code)
    csrf.remember_token(response, token)
    return response


@router.get("/", response_class=HTMLResponse)
async def index(request: Request):
    async with _lock(request):
        return _render_index(request)


@router.post("/members", dependencies=[Depends(csrf.require_csrf)])
async def submit_member(
    request: Request,
    prefix: str = Form(""),
    first_name: str = Form("", alias="firstName"),
    last_name: str = Form("", alias="lastName"),
    work_history: str = Form("", alias="workHistory"),
    minister_position: str = Form("", alias="ministerPosition"),
    ministry: str = Form(""),
    party: str = Form(""),
    photo_file: UploadFile | None = File(None, alias="photoFile"),
):
    values = {
        "prefix": prefix,
        "firstName": first_name,
        "lastName": last_name,
        "workHistory": work_history,
        "ministerPosition": minister_position,
        "ministry": ministry,
        "party": party,
    }
    editor = _editor(request)
    async with _lock(request):
        result = await editor.submit(values, _upload_or_none(photo_file))
        if not result.ok:
            return _render_index(request, status_code=400)
    return _home()


@router.get("/members/preview")
async def get_preview(request: Request):
    async with _lock(request):
        payload = _editor(request).preview.read()
    if not payload:
        return Response(status_code=204)
    data, content_type = payload
    return Response(content=data, media_type=content_type, headers={"Cache-Control": "no-store"})


@router.post("/members/preview", dependencies=[Depends(csrf.require_csrf)])
async def set_preview(request: Request, photo_file: UploadFile | None = File(None, alias="photoFile")):
    editor = _editor(request)
    upload = _upload_or_none(photo_file)
    async with _lock(request):
        if upload is None:
            editor.preview.release()
            return JSONResponse({"ok": True, "preview": False})
        try:
            await editor.select_photo(upload)
        except ImageReadError as exc:
            editor.preview.release()
            return JSONResponse({"ok": False, "message": exc.message}, status_code=400)
    return JSONResponse({"ok": True, "preview": True})


@router.post("/members/cancel", dependencies=[Depends(csrf.require_csrf)])
async def cancel_edit(request: Request):
    async with _lock(request):
        _editor(request).cancel()
    return _home()


@router.post("/members/{member_id}/edit", dependencies=[Depends(csrf.require_csrf)])
async def edit_member(member_id: str, request: Request):
    async with _lock(request):
        try:
            _editor(request).begin_edit(member_id)
        except MemberNotFoundError:
            raise HTTPException(404, "Member not found")
    return _home()


@router.post("/members/{member_id}/delete", dependencies=[Depends(csrf.require_csrf)])
async def delete_member(member_id: str, request: Request):
    async with _lock(request):
        _editor(request).delete(member_id)
    return _home()


@router.get("/api/members")
async def list_members(request: Request):
    async with _lock(request):
        snapshot = _editor(request).store.snapshot()
    return JSONResponse(snapshot)
