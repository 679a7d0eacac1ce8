from listings_hub.services.storage import LocalObjectStore, purge_media


def test_put_and_resolve(tmp_path):
    store = LocalObjectStore(str(tmp_path))
    ref = store.put_bytes(key="usr_1/a.jpg", data=b"x")
    assert ref == "listings/usr_1/a.jpg"
    assert store.resolve_path(ref) == tmp_path / "usr_1" / "a.jpg"
    assert store.resolve_path(f"file://{tmp_path}/b.jpg") == tmp_path / "b.jpg"


def test_purge_media_attempts_every_ref(tmp_path):
    store = LocalObjectStore(str(tmp_path))
    kept = [store.put_bytes(key=f"usr_1/{n}.jpg", data=b"x") for n in ("a", "b")]
    refs = [kept[0], "listings/usr_1/missing.jpg", None, "s3://bucket/x.jpg", kept[1]]

    failed = purge_media(store, refs)

    assert failed == ["listings/usr_1/missing.jpg", "s3://bucket/x.jpg"]
    assert not any(store.resolve_path(r).exists() for r in kept)
