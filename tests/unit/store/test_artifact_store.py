"""Unit tests for the versioned artifact store."""

from __future__ import annotations

import pytest

from core.config import VaultConfig
from core.errors import BackendFailureError, InvalidPayloadError
from core.types import Coordinate
from store.artifact_store import ArtifactStore
from store.memory_blob_store import MemoryBlobStore

COORDINATE = Coordinate(app_name="app1", user_id="u1", session_id="s1")
OTHER_SESSION = Coordinate(app_name="app1", user_id="u1", session_id="s2")


class _RecordingBlobStore(MemoryBlobStore):
    """Memory backend that records calls and can fail on demand."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[str] = []
        self.fail_get = False
        self.fail_put = False
        self.fail_list = False
        self.fail_delete_keys: set[str] = set()
        self.drop_metadata = False

    def get(self, key: str) -> bytes | None:
        self.calls.append("get")
        if self.fail_get:
            raise BackendFailureError("download unavailable")
        return super().get(key)

    def get_metadata(self, key: str) -> str | None:
        self.calls.append("get_metadata")
        if self.drop_metadata:
            return None
        return super().get_metadata(key)

    def put(self, key: str, payload: bytes, content_type: str) -> None:
        self.calls.append("put")
        if self.fail_put:
            raise BackendFailureError("quota exceeded")
        super().put(key, payload, content_type)

    def list_by_prefix(self, prefix: str) -> list[str]:
        self.calls.append("list_by_prefix")
        if self.fail_list:
            raise BackendFailureError("listing unavailable")
        return super().list_by_prefix(prefix)

    def delete(self, key: str, ignore_absent: bool = True) -> None:
        self.calls.append("delete")
        if key in self.fail_delete_keys:
            raise BackendFailureError("delete unavailable")
        super().delete(key, ignore_absent)


def _store() -> tuple[ArtifactStore, _RecordingBlobStore]:
    blob_store = _RecordingBlobStore()
    return ArtifactStore(blob_store), blob_store


def test_sequential_saves_number_versions_from_zero() -> None:
    """N sequential saves should return versions 0..N-1."""
    store, _ = _store()

    versions = [store.save(COORDINATE, "notes.txt", f"v{i}".encode()) for i in range(5)]

    assert versions == [0, 1, 2, 3, 4]


def test_save_and_load_scenario() -> None:
    """Explicit and latest loads should follow the saved history."""
    store, _ = _store()
    first = store.save(COORDINATE, "notes.txt", b"hello", "text/plain")
    second = store.save(COORDINATE, "notes.txt", b"world", "text/plain")

    pinned = store.load(COORDINATE, "notes.txt", version=0)
    latest = store.load(COORDINATE, "notes.txt")

    assert (first, second) == (0, 1)
    assert pinned is not None and pinned.payload == b"hello"
    assert latest is not None and (latest.payload, latest.version) == (b"world", 1)


def test_save_writes_canonical_session_key() -> None:
    """Session artifacts should land under the session-scoped key."""
    store, blob_store = _store()

    store.save(COORDINATE, "notes.txt", b"hello")

    assert blob_store.list_by_prefix("") == ["app1/u1/s1/notes.txt/0"]


def test_save_continues_after_highest_existing_version() -> None:
    """Next version should follow the maximum even with gaps."""
    store, blob_store = _store()
    blob_store.put("app1/u1/s1/notes.txt/4", b"old", "text/plain")

    version = store.save(COORDINATE, "notes.txt", b"new")

    assert version == 5


def test_save_rejects_empty_payload_before_backend_io() -> None:
    """Empty payloads should fail fast without touching the backend."""
    store, blob_store = _store()

    with pytest.raises(InvalidPayloadError):
        store.save(COORDINATE, "notes.txt", b"")

    assert blob_store.calls == []


def test_save_rejects_text_payload() -> None:
    """Text must be encoded at the edge before reaching the store."""
    store, blob_store = _store()

    with pytest.raises(InvalidPayloadError):
        store.save(COORDINATE, "notes.txt", "hello")  # type: ignore[arg-type]

    assert blob_store.calls == []


@pytest.mark.parametrize("filename", ["", "dir/notes.txt"])
def test_save_rejects_filenames_that_break_key_layout(filename: str) -> None:
    """Empty filenames or filenames with separators should be rejected."""
    store, blob_store = _store()

    with pytest.raises(InvalidPayloadError):
        store.save(COORDINATE, filename, b"hello")

    assert blob_store.calls == []


def test_save_accepts_bytearray_payload() -> None:
    """Mutable buffers should be copied into immutable bytes."""
    store, _ = _store()
    buffer = bytearray(b"hello")

    store.save(COORDINATE, "notes.txt", buffer)
    buffer[:] = b"HELLO"

    loaded = store.load(COORDINATE, "notes.txt")
    assert loaded is not None and loaded.payload == b"hello"


def test_save_propagates_put_failures() -> None:
    """Save should surface backend write failures unmodified."""
    store, blob_store = _store()
    blob_store.fail_put = True

    with pytest.raises(BackendFailureError, match="quota exceeded"):
        store.save(COORDINATE, "notes.txt", b"hello")


def test_save_propagates_scan_failures() -> None:
    """Save should surface version scan failures."""
    store, blob_store = _store()
    blob_store.fail_list = True

    with pytest.raises(BackendFailureError):
        store.save(COORDINATE, "notes.txt", b"hello")

    assert "put" not in blob_store.calls


def test_save_uses_configured_default_content_type() -> None:
    """Missing content types should default from config."""
    blob_store = MemoryBlobStore()
    store = ArtifactStore(blob_store, VaultConfig(default_content_type="application/x-test"))

    store.save(COORDINATE, "notes.txt", b"hello")

    assert blob_store.get_metadata("app1/u1/s1/notes.txt/0") == "application/x-test"


def test_load_returns_none_when_no_versions_exist() -> None:
    """Loading a missing artifact should return None."""
    store, _ = _store()

    assert store.load(COORDINATE, "missing.txt") is None


def test_load_returns_none_for_unknown_version() -> None:
    """Loading a version that was never written should return None."""
    store, _ = _store()
    store.save(COORDINATE, "notes.txt", b"hello")

    assert store.load(COORDINATE, "notes.txt", version=9) is None


def test_load_maps_backend_failures_to_none() -> None:
    """Download failures should read as a missing artifact."""
    store, blob_store = _store()
    store.save(COORDINATE, "notes.txt", b"hello")
    blob_store.fail_get = True

    assert store.load(COORDINATE, "notes.txt", version=0) is None


def test_load_treats_empty_blob_as_missing() -> None:
    """An empty stored payload should read as a missing artifact."""
    store, blob_store = _store()
    blob_store.put("app1/u1/s1/notes.txt/0", b"", "text/plain")

    assert store.load(COORDINATE, "notes.txt", version=0) is None


def test_load_defaults_missing_content_type() -> None:
    """Artifacts without stored content type should report octet-stream."""
    store, blob_store = _store()
    store.save(COORDINATE, "notes.txt", b"hello", "text/plain")
    blob_store.drop_metadata = True

    loaded = store.load(COORDINATE, "notes.txt")

    assert loaded is not None and loaded.content_type == "application/octet-stream"


def test_load_pinned_version_unaffected_by_later_saves() -> None:
    """An explicit version should keep returning its original bytes."""
    store, _ = _store()
    store.save(COORDINATE, "notes.txt", b"first")
    for index in range(3):
        store.save(COORDINATE, "notes.txt", f"later-{index}".encode())

    loaded = store.load(COORDINATE, "notes.txt", version=0)

    assert loaded is not None and loaded.payload == b"first"


def test_shared_artifacts_are_visible_across_sessions() -> None:
    """user: artifacts saved in one session should load from another."""
    store, _ = _store()
    store.save(COORDINATE, "user:profile.json", b"{}", "application/json")

    loaded = store.load(OTHER_SESSION, "user:profile.json")

    assert loaded is not None and loaded.content_type == "application/json"
    assert store.list_artifact_keys("app1", "u1", "s2") == ["user:profile.json"]


def test_session_artifacts_are_isolated_between_sessions() -> None:
    """Session artifacts should not leak into other sessions."""
    store, _ = _store()
    store.save(COORDINATE, "notes.txt", b"hello")

    assert store.load(OTHER_SESSION, "notes.txt") is None
    assert store.list_artifact_keys("app1", "u1", "s2") == []


def test_list_artifact_keys_dedupes_and_sorts() -> None:
    """Each filename should appear once in lexicographic order."""
    store, _ = _store()
    for _ in range(3):
        store.save(COORDINATE, "b.txt", b"x")
    store.save(COORDINATE, "user:a.txt", b"x")
    store.save(COORDINATE, "c.txt", b"x")
    store.save(OTHER_SESSION, "z.txt", b"x")

    keys = store.list_artifact_keys("app1", "u1", "s1")

    assert keys == ["b.txt", "c.txt", "user:a.txt"]


def test_list_artifact_keys_ignores_sibling_session_prefixes() -> None:
    """Session s1 should not match keys belonging to session s10."""
    store, _ = _store()
    store.save(Coordinate("app1", "u1", "s10"), "notes.txt", b"x")

    assert store.list_artifact_keys("app1", "u1", "s1") == []


def test_list_artifact_keys_propagates_scan_failures() -> None:
    """Key listing should surface backend scan failures."""
    store, blob_store = _store()
    blob_store.fail_list = True

    with pytest.raises(BackendFailureError):
        store.list_artifact_keys("app1", "u1", "s1")


def test_delete_artifact_resets_version_numbering() -> None:
    """After deleting, versions are empty and numbering restarts at zero."""
    store, _ = _store()
    store.save(COORDINATE, "notes.txt", b"hello")
    store.save(COORDINATE, "notes.txt", b"world")

    store.delete_artifact(COORDINATE, "notes.txt")

    assert store.list_versions(COORDINATE, "notes.txt") == []
    assert store.save(COORDINATE, "notes.txt", b"again") == 0


def test_delete_artifact_leaves_other_files_untouched() -> None:
    """Deleting one filename should not remove its neighbors."""
    store, _ = _store()
    store.save(COORDINATE, "notes.txt", b"hello")
    store.save(COORDINATE, "other.txt", b"keep")

    store.delete_artifact(COORDINATE, "notes.txt")

    assert store.list_artifact_keys("app1", "u1", "s1") == ["other.txt"]


def test_delete_artifact_is_noop_for_missing_artifact() -> None:
    """Deleting an artifact that never existed should not fail."""
    store, blob_store = _store()

    store.delete_artifact(COORDINATE, "missing.txt")

    assert "delete" not in blob_store.calls


def test_delete_artifact_skips_failed_versions() -> None:
    """Failed version deletes should be skipped without raising."""
    store, blob_store = _store()
    for payload in (b"a", b"b", b"c"):
        store.save(COORDINATE, "notes.txt", payload)
    blob_store.fail_delete_keys = {"app1/u1/s1/notes.txt/1"}

    store.delete_artifact(COORDINATE, "notes.txt")

    assert store.list_versions(COORDINATE, "notes.txt") == [1]


def test_delete_artifact_swallows_scan_failures() -> None:
    """A failing version scan should leave delete as a silent no-op."""
    store, blob_store = _store()
    blob_store.fail_list = True

    store.delete_artifact(COORDINATE, "notes.txt")

    assert "delete" not in blob_store.calls


def test_list_versions_returns_ascending_list() -> None:
    """Version listing should be sorted ascending."""
    store, blob_store = _store()
    for version in (7, 2, 11):
        blob_store.put(f"app1/u1/user/user:cfg/{version}", b"x", "text/plain")

    assert store.list_versions(COORDINATE, "user:cfg") == [2, 7, 11]


def test_load_latest_propagates_scan_failures() -> None:
    """Resolving the latest version should surface scan failures."""
    store, blob_store = _store()
    store.save(COORDINATE, "notes.txt", b"hello")
    blob_store.fail_list = True

    with pytest.raises(BackendFailureError):
        store.load(COORDINATE, "notes.txt")

    assert "get" not in blob_store.calls
