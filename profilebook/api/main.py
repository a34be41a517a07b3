"""
HTTP adapter over the profile core.
Views (form, preview, my-profile, connections) talk to these endpoints.
"""

import json
import weakref
from typing import List

from fastapi import Depends, FastAPI, File, Form, HTTPException, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from .schemas import (
    ConnectionAddResponse,
    ConnectionEntry,
    ConnectionListResponse,
    DeleteResponse,
    HealthResponse,
    PreviewRequest,
    PreviewResponse,
    ProfileEditRequest,
    ProfileView,
    RowResponse,
)
from ..core.assets import BinaryAsset
from ..core.config import VERSION, debug_enabled, get_store
from ..core.connections import ConnectionLedger
from ..core.db import health_check
from ..core.errors import ProfileNotFound, QuotaExceeded, ReadError, SaveInProgress
from ..core.flatten import PRESENT, flatten, visible_rows
from ..core.profile_store import ProfileStore, identity_of
from ..core.schema import ABSENT, AddResult
from ..core.storage import KeyValueStore, SqliteKeyValueStore
from ..core.workflow import IMAGES_FIELD, PHOTOS_FIELD, DraftConfirmation, ProfileEditor, is_previewable, preview_rows
from ..util.logging import logger

app = FastAPI(
    title="Profilebook API",
    version=VERSION,
    description="Local profile builder with saved connections",
    docs_url="/docs" if debug_enabled() else None,
    redoc_url="/redoc" if debug_enabled() else None
)

# Add CORS middleware to allow frontend connections
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_store = None
# One confirmation guard per store so duplicate submits are rejected
_confirmations = weakref.WeakKeyDictionary()


def get_kv_store() -> KeyValueStore:
    global _store
    if _store is None:
        _store = get_store()
    return _store


def get_profile_store(store: KeyValueStore = Depends(get_kv_store)) -> ProfileStore:
    return ProfileStore(store)


def get_ledger(store: KeyValueStore = Depends(get_kv_store)) -> ConnectionLedger:
    return ConnectionLedger(store)


def get_editor(profile_store: ProfileStore = Depends(get_profile_store),
               ledger: ConnectionLedger = Depends(get_ledger)) -> ProfileEditor:
    editor = ProfileEditor(profile_store, ledger)
    editor.load()
    return editor


def get_confirmation(store: KeyValueStore = Depends(get_kv_store)) -> DraftConfirmation:
    confirmation = _confirmations.get(store)
    if confirmation is None:
        confirmation = DraftConfirmation(ProfileStore(store))
        _confirmations[store] = confirmation
    return confirmation


def _rows(rows) -> List[RowResponse]:
    return [RowResponse(label=row.label, value=row.value) for row in rows]


def _view(editor: ProfileEditor) -> ProfileView:
    try:
        return ProfileView(rows=_rows(editor.view_rows()), avatar=editor.avatar(), gallery=editor.gallery())
    except ProfileNotFound:
        raise HTTPException(status_code=404, detail="No profile found")


def _quota_error() -> HTTPException:
    return HTTPException(status_code=507, detail=QuotaExceeded.guidance)


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint(store: KeyValueStore = Depends(get_kv_store)):
    """Check system health."""
    db_health = health_check(store.db_path) if isinstance(store, SqliteKeyValueStore) else True
    return HealthResponse(
        status="healthy" if db_health else "unhealthy",
        version=VERSION,
        db_health=db_health,
        storage_usage=store.usage()
    )


@app.post("/profile/preview", response_model=PreviewResponse)
def preview_profile(req: PreviewRequest):
    """Rows shown on the preview page for a draft."""
    return PreviewResponse(rows=_rows(preview_rows(req.draft)), previewable=is_previewable(req.draft))


@app.post("/profile", response_model=ProfileView, status_code=201)
async def confirm_profile(draft: str = Form(...),
                          photos: List[UploadFile] = File(default=[]),
                          confirmation: DraftConfirmation = Depends(get_confirmation),
                          ledger: ConnectionLedger = Depends(get_ledger)):
    """Confirm a draft: encode its photos and persist it as the current profile."""
    try:
        record = json.loads(draft)
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=422, detail=f"Invalid draft JSON: {e}")
    if not isinstance(record, dict):
        raise HTTPException(status_code=422, detail="Draft must be a JSON object")

    record[PHOTOS_FIELD] = [BinaryAsset(photo.filename or "photo", photo, photo.content_type) for photo in photos]

    try:
        await confirmation.confirm(record)
    except SaveInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ReadError as e:
        logger.error(f"Error processing files: {e}")
        raise HTTPException(status_code=400, detail="Failed to save profile photos. Please try again.")
    except QuotaExceeded:
        raise _quota_error()

    editor = ProfileEditor(confirmation.profile_store, ledger)
    editor.load()
    return _view(editor)


@app.get("/profile", response_model=ProfileView)
def get_profile(editor: ProfileEditor = Depends(get_editor)):
    return _view(editor)


@app.patch("/profile", response_model=ProfileView)
def edit_profile(req: ProfileEditRequest, editor: ProfileEditor = Depends(get_editor)):
    """Apply field edits and save them in one step."""
    if editor.profile is ABSENT:
        raise HTTPException(status_code=404, detail="No profile found")

    editor.begin_edit()
    for edit in req.edits:
        editor.change(edit.label, edit.value)

    try:
        editor.save()
    except QuotaExceeded:
        raise _quota_error()
    return _view(editor)


@app.put("/profile/avatar", response_model=ProfileView)
async def replace_avatar(file: UploadFile = File(...), editor: ProfileEditor = Depends(get_editor)):
    if editor.profile is ABSENT:
        raise HTTPException(status_code=404, detail="No profile found")

    try:
        await editor.replace_avatar(BinaryAsset(file.filename or "avatar", file, file.content_type))
    except ReadError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except QuotaExceeded:
        raise _quota_error()
    return _view(editor)


@app.delete("/profile", response_model=DeleteResponse)
def delete_profile(editor: ProfileEditor = Depends(get_editor)):
    """Delete the profile and the saved connections sharing its identity."""
    removed = editor.delete()
    return DeleteResponse(success=True, connections_removed=removed)


@app.post("/connections", response_model=ConnectionAddResponse, status_code=201)
def save_to_connections(response: Response, editor: ProfileEditor = Depends(get_editor)):
    try:
        result = editor.save_to_connections()
    except ProfileNotFound:
        raise HTTPException(status_code=404, detail="No profile found")
    except QuotaExceeded:
        raise _quota_error()

    if result is AddResult.ALREADY_EXISTS:
        response.status_code = 200
    return ConnectionAddResponse(result=result.value, size=len(editor.ledger))


@app.get("/connections", response_model=ConnectionListResponse)
def list_connections(ledger: ConnectionLedger = Depends(get_ledger)):
    entries = [
        ConnectionEntry(
            identity=identity_of(entry),
            rows=_rows(visible_rows(flatten({**entry, IMAGES_FIELD: None}), PRESENT))
        )
        for entry in ledger.list()
    ]
    return ConnectionListResponse(connections=entries)
