"""
Profile workflows - draft preview/confirm and the my-profile editing session.
"""

from typing import Any, Dict, List, Optional, Union

from .assets import BinaryAsset, PreviewHandle, PreviewRegistry, encode, encode_batch
from .config import DEFAULT_AVATAR, get_edit_strategy
from .connections import ConnectionLedger
from .errors import ProfileNotFound, SaveInProgress
from .flatten import PRESENT, TRUTHY, flatten, visible_rows
from .profile_store import ProfileStore, identity_of
from .reconstruct import apply_edit, apply_edit_at
from .schema import ABSENT, AddResult, Row
from ..util.logging import audit_event, logger

PHOTOS_FIELD = "photos"
IMAGES_FIELD = "uploadedImages"


def is_previewable(draft: Any) -> bool:
    """A draft can be previewed once the form has produced a first name."""
    return isinstance(draft, dict) and bool(draft.get("firstName"))


def preview_rows(draft: Dict[str, Any]) -> List[Row]:
    """Rows shown on the preview page: raw photos hidden, empty values dropped."""
    return visible_rows(flatten({**draft, PHOTOS_FIELD: None}), TRUTHY)


def preview_thumbnails(draft: Dict[str, Any], registry: PreviewRegistry) -> List[PreviewHandle]:
    photos = draft.get(PHOTOS_FIELD) or []
    return registry.acquire_all(photo for photo in photos if isinstance(photo, BinaryAsset))


class DraftConfirmation:
    """Encodes a draft's photos and persists it as the current profile."""

    def __init__(self, profile_store: ProfileStore):
        self.profile_store = profile_store
        self.saving = False

    async def confirm(self, draft: Dict[str, Any]) -> Dict[str, Any]:
        """Encode every photo, then persist the finished record.

        Nothing is written unless all photos were encoded. Raises SaveInProgress
        on re-entry, ReadError for an unreadable photo and QuotaExceeded when
        storage is full.
        """
        if self.saving:
            raise SaveInProgress("A profile save is already in progress")
        if not is_previewable(draft):
            raise ValueError("Draft is missing a first name")

        self.saving = True
        try:
            encoded = await encode_batch(draft.get(PHOTOS_FIELD) or [])
            record = {**draft, PHOTOS_FIELD: [], IMAGES_FIELD: encoded}
            self.profile_store.save(record)
        finally:
            self.saving = False

        audit_event("profile.confirm", {"identity": identity_of(record), "images": len(encoded)}, record)
        return record


class ProfileEditor:
    """Editing session over the stored profile.

    Edits accumulate in ``draft`` and are persisted only by ``save()``;
    ``cancel()`` discards them.
    """

    def __init__(self, profile_store: ProfileStore, ledger: ConnectionLedger,
                 edit_strategy: Optional[str] = None, default_avatar: str = DEFAULT_AVATAR):
        self.profile_store = profile_store
        self.ledger = ledger
        self.edit_strategy = edit_strategy or get_edit_strategy()
        self.default_avatar = default_avatar
        self.profile = ABSENT
        self.draft: Dict[str, Any] = {}
        self.editing = False

    def load(self):
        record = self.profile_store.load()
        self.profile = record
        self.draft = record if record is not ABSENT else {}
        self.editing = False
        return record

    def _require_profile(self) -> Dict[str, Any]:
        if self.profile is ABSENT:
            raise ProfileNotFound("No profile found")
        return self.profile

    @property
    def display(self) -> Dict[str, Any]:
        return self.draft if self.editing else self._require_profile()

    def view_rows(self) -> List[Row]:
        return visible_rows(flatten({**self.display, IMAGES_FIELD: None}), PRESENT)

    def avatar(self) -> str:
        images = self.display.get(IMAGES_FIELD) or []
        return images[0] if images and images[0] else self.default_avatar

    def gallery(self) -> List[str]:
        images = self.display.get(IMAGES_FIELD) or []
        return list(images[1:])

    def begin_edit(self) -> None:
        self._require_profile()
        self.editing = True

    def change(self, target: Union[Row, str], value: Any) -> Dict[str, Any]:
        """Apply one field change to the draft."""
        if not self.editing:
            raise RuntimeError("Profile is not being edited")

        if self.edit_strategy == "path":
            row = target if isinstance(target, Row) else self._row_for_label(target)
            if row is not None and row.path:
                self.draft = apply_edit_at(self.draft, row.path, value)
                return self.draft

        label = target.label if isinstance(target, Row) else target
        self.draft = apply_edit(self.draft, label, value)
        return self.draft

    def _row_for_label(self, label: str) -> Optional[Row]:
        for row in self.view_rows():
            if row.label == label:
                return row
        return None

    def save(self) -> Dict[str, Any]:
        """Persist the draft; on failure the session stays in edit mode."""
        if not self.editing:
            raise RuntimeError("Profile is not being edited")
        self._require_profile()

        self.profile_store.save(self.draft)
        audit_event("profile.edit", {"identity": identity_of(self.draft)}, self.draft)
        self.profile = self.draft
        self.editing = False
        return self.profile

    def cancel(self) -> None:
        self.draft = self.profile if self.profile is not ABSENT else {}
        self.editing = False

    def delete(self) -> int:
        """Delete the profile and any saved connections with its identity."""
        record = self.profile
        self.profile_store.delete()

        removed = 0
        if record is not ABSENT:
            removed = self.ledger.remove_matching(record)
            logger.log_profile_operation("delete_cascade", identity_of(record),
                                         details={"connections_removed": removed})

        self.profile = ABSENT
        self.draft = {}
        self.editing = False
        return removed

    async def replace_avatar(self, asset: BinaryAsset) -> Dict[str, Any]:
        """Replace the first uploaded image.

        Outside edit mode the change is persisted immediately; while editing it
        only lands in the draft.
        """
        base = self.draft if self.editing else self._require_profile()
        encoded = await encode(asset)

        images = list(base.get(IMAGES_FIELD) or [])
        if images:
            images[0] = encoded
        else:
            images.append(encoded)
        updated = {**base, IMAGES_FIELD: images}

        if not self.editing:
            self.profile_store.save(updated)
            self.profile = updated
        self.draft = updated
        return updated

    def save_to_connections(self) -> AddResult:
        return self.ledger.add(self._require_profile())
