from __future__ import annotations

import pytest

from portfolio.filesystem import FilesystemError, get_filesystem_info, is_filesystem_writable, read_json_file, write_json_file
from portfolio.storage.json_file import JsonFileStore, next_project_id


def test_read_missing_file(tmp_path):
    with pytest.raises(FilesystemError) as exc:
        read_json_file(tmp_path / "missing.json")
    assert exc.value.code == "ENOENT"
    assert not exc.value.is_read_only


def test_read_invalid_json(tmp_path):
    p = tmp_path / "bad.json"
    p.write_text("{oops", encoding="utf-8")
    with pytest.raises(FilesystemError) as exc:
        read_json_file(p)
    assert exc.value.code == "INVALID_JSON"


def test_write_into_missing_directory(tmp_path):
    with pytest.raises(FilesystemError) as exc:
        write_json_file(tmp_path / "nope" / "data.json", {"a": 1})
    assert exc.value.code == "ENOENT"


def test_write_leaves_no_temp_files(tmp_path):
    p = tmp_path / "data.json"
    write_json_file(p, {"projects": [{"id": 1, "title": "é"}]})
    assert read_json_file(p) == {"projects": [{"id": 1, "title": "é"}]}
    assert [f.name for f in tmp_path.iterdir()] == ["data.json"]


def test_writable_probe(tmp_path):
    assert is_filesystem_writable(tmp_path)
    assert not is_filesystem_writable(tmp_path / "does-not-exist")
    assert list(tmp_path.iterdir()) == []


def test_filesystem_info_shape():
    info = get_filesystem_info()
    assert set(info) >= {"environment", "isProduction", "isWritable", "cwdWritable", "tmpWritable"}
    assert info["tmpWritable"] is True


def test_json_store_tolerates_odd_shapes(tmp_path):
    p = tmp_path / "data.json"
    p.write_text('{"projects": "not-a-list", "other": 1}', encoding="utf-8")
    store = JsonFileStore(p)
    assert store.list_projects() == []

    store.mutate(lambda data: data["projects"].append({"id": 1}))
    assert read_json_file(p) == {"projects": [{"id": 1}], "other": 1}


def test_next_project_id():
    assert next_project_id([]) == 1
    assert next_project_id([{"id": 3}, {"id": 7}, {"id": "x"}]) == 8
