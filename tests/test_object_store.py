import pytest

from services.persistence.object_store import LocalObjectStore, ObjectStoreError, safe_key


def test_safe_key_sanitizes_segments():
    assert safe_key("/contact_photos/12_my photo (1).png") == "contact_photos/12_my_photo__1_.png"


@pytest.mark.parametrize("key", ["", "/", "../etc/passwd", "student_photos/../../x", "a/./b"])
def test_safe_key_rejects_traversal(key):
    with pytest.raises(ObjectStoreError):
        safe_key(key)


def test_put_writes_blob_and_returns_public_url(tmp_path):
    store = LocalObjectStore(tmp_path, "http://cdn.local/")
    url = store.put("student_photos/1_kid.png", b"png-bytes")

    assert url == "http://cdn.local/media/student_photos/1_kid.png"
    assert (tmp_path / "student_photos" / "1_kid.png").read_bytes() == b"png-bytes"
    assert not list(tmp_path.rglob("*.part"))


def test_open_reports_content_type(tmp_path):
    store = LocalObjectStore(tmp_path, "http://cdn.local")
    store.put("contact_photos/2_mom.jpg", b"jpg")
    path, ctype = store.open("contact_photos/2_mom.jpg")
    assert path.read_bytes() == b"jpg"
    assert ctype == "image/jpeg"


def test_open_missing_raises(tmp_path):
    store = LocalObjectStore(tmp_path, "http://cdn.local")
    with pytest.raises(FileNotFoundError):
        store.open("contact_photos/none.jpg")
