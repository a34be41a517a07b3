"""
Profile Store tests - single-slot save/load/delete semantics.
"""

import pytest

from profilebook.core.errors import QuotaExceeded
from profilebook.core.profile_store import ProfileStore, identity_of
from profilebook.core.schema import ABSENT
from profilebook.core.storage import InMemoryKeyValueStore, SqliteKeyValueStore


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def profile():
    return {
        "firstName": "Amit",
        "email": "a@x.com",
        "address": {"city": "Pune"},
        "uploadedImages": ["data:image/png;base64,AAAA"],
    }


class TestProfileStore:
    """Test the current-profile slot."""

    def test_load_empty_is_absent(self, store):
        assert ProfileStore(store).load() is ABSENT

    def test_absent_is_falsy(self):
        assert not ABSENT
        assert repr(ABSENT) == "ABSENT"

    def test_save_and_load(self, store, profile):
        profiles = ProfileStore(store)
        profiles.save(profile)
        assert profiles.load() == profile
        assert profiles.exists()

    def test_save_replaces(self, store, profile):
        profiles = ProfileStore(store)
        profiles.save(profile)
        profiles.save({"firstName": "Ria"})
        assert profiles.load() == {"firstName": "Ria"}

    def test_delete_then_load(self, store, profile):
        profiles = ProfileStore(store)
        profiles.save(profile)
        profiles.delete()
        assert profiles.load() is ABSENT
        assert not profiles.exists()

    def test_delete_when_absent(self, store):
        profiles = ProfileStore(store)
        profiles.delete()
        profiles.delete()
        assert profiles.load() is ABSENT

    def test_uses_configured_key(self, store, profile):
        ProfileStore(store, key="otherProfile").save(profile)
        assert store.keys() == ["otherProfile"]
        assert ProfileStore(store).load() is ABSENT

    def test_quota_exceeded_keeps_previous_record(self, profile):
        small_store = InMemoryKeyValueStore(quota_bytes=300)
        profiles = ProfileStore(small_store)
        profiles.save(profile)

        bigger = {**profile, "uploadedImages": ["data:image/png;base64," + "A" * 1000]}
        with pytest.raises(QuotaExceeded):
            profiles.save(bigger)

        assert profiles.load() == profile

    def test_tolerates_extra_and_missing_fields(self, store):
        store.set("myProfile", '{"firstName": "Amit", "futureField": {"x": 1}}')
        assert ProfileStore(store).load() == {"firstName": "Amit", "futureField": {"x": 1}}

    def test_corrupt_value_is_absent(self, store):
        store.set("myProfile", "{not json")
        assert ProfileStore(store).load() is ABSENT

    def test_sqlite_backend(self, tmp_path, profile):
        profiles = ProfileStore(SqliteKeyValueStore(db_path=str(tmp_path / "p.db")))
        profiles.save(profile)
        assert profiles.load() == profile


class TestIdentityOf:

    @pytest.mark.parametrize("record,expected", [
        ({"email": "a@x.com"}, "a@x.com"),
        ({"email": ""}, None),
        ({"email": None}, None),
        ({"name": "Amit"}, None),
        ("not a record", None),
    ])
    def test_identity(self, record, expected):
        assert identity_of(record) == expected
