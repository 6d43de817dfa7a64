import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from cubequality.models.report import ReportMedia
from cubequality.schemas.report import MediaBlob
from cubequality.services.store import WRITE_ERROR, StoreError


def _refs(store):
    return [report.unique_ref_no for report in store.get_all()]


def test_save_inserts_new_reports_first(store, make_report):
    store.save(make_report("A"))
    store.save(make_report("B"))

    assert _refs(store) == ["B", "A"]
    assert store.get("A").client_name == "Future Homes LLC"
    assert store.get("missing") is None


def test_save_replaces_in_place(store, make_report):
    store.save(make_report("A"))
    store.save(make_report("B"))
    store.save(make_report("A", grade="M40"))

    assert _refs(store) == ["B", "A"]
    assert store.get("A").grade == "M40"


def test_keys_are_case_sensitive(store, make_report):
    store.save(make_report("abc"))
    store.save(make_report("ABC"))

    assert sorted(store.unique_refs()) == ["ABC", "abc"]


def test_save_multiple_merges_and_appends(store, make_report):
    store.save(make_report("A"))
    store.save(make_report("B"))

    store.save_multiple([make_report("A", client_name="Replaced"), make_report("C"), make_report("D")])

    assert _refs(store) == ["B", "A", "C", "D"]
    assert store.get("A").client_name == "Replaced"


def test_save_multiple_last_duplicate_wins(store, make_report):
    store.save_multiple([make_report("A", grade="M20"), make_report("B"), make_report("A", grade="M35")])

    assert _refs(store) == ["A", "B"]
    assert store.get("A").grade == "M35"


def test_save_multiple_is_idempotent_and_empty_batch_is_noop(store, make_report):
    batch = [make_report("A"), make_report("B")]
    store.save_multiple(batch)
    store.save_multiple(batch)
    store.save_multiple([])

    assert _refs(store) == ["A", "B"]


def test_media_round_trip_and_replacement(store, make_report):
    report = make_report("A")
    report.seven_days_ctm_media_blob = MediaBlob(content_type="image/png", data=b"\x89PNG\r\n")
    store.save(report)

    loaded = store.get("A")
    assert loaded.seven_days_ctm_media_blob.data == b"\x89PNG\r\n"
    assert loaded.seven_days_ctm_media_blob.content_type == "image/png"
    assert loaded.twenty_eight_days_ctm_media_blob is None

    loaded.seven_days_ctm_media_blob = MediaBlob(content_type="video/mp4", data=b"\x00\x01")
    store.save(loaded)
    assert store.get("A").seven_days_ctm_media_blob.content_type == "video/mp4"

    loaded.seven_days_ctm_media_blob = None
    store.save(loaded)
    assert store.get("A").seven_days_ctm_media_blob is None


def test_analysis_and_fingerprint_survive_storage(store, make_report):
    report = make_report("A", timestamp="2024-08-01T10:30:00.000Z", hash="c" * 64)
    store.save(report)

    loaded = store.get("A")
    assert loaded.timestamp == "2024-08-01T10:30:00.000Z"
    assert loaded.hash == "c" * 64
    assert loaded.business_fields() == report.business_fields()


def test_delete(store, make_report):
    report = make_report("A")
    report.seven_days_ctm_media_blob = MediaBlob(content_type="image/jpeg", data=b"jpg")
    store.save(report)

    assert store.delete("A") is True
    assert store.delete("A") is False
    assert store.get_all() == []
    assert store.db.scalar(select(func.count()).select_from(ReportMedia)) == 0


def test_write_failures_raise_store_error(store, make_report, monkeypatch):
    def _boom():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(store.db, "commit", _boom)

    with pytest.raises(StoreError, match=WRITE_ERROR):
        store.save(make_report("A"))
    with pytest.raises(StoreError):
        store.save_multiple([make_report("B")])


def test_media_type_parameters_with_commas_survive_storage(store, make_report):
    content_type = 'video/mp4; codecs="avc1.42E01E, mp4a.40.2"'
    report = make_report("R-1")
    report.seven_days_ctm_media_blob = MediaBlob(content_type=content_type, data=b"\x00\x00")
    store.save(report)
    store.save(make_report("R-2"))

    loaded = {item.unique_ref_no: item for item in store.get_all()}

    assert sorted(loaded) == ["R-1", "R-2"]
    assert loaded["R-1"].seven_days_ctm_media_blob.content_type == content_type
    assert loaded["R-1"].seven_days_ctm_media_blob.data == b"\x00\x00"
