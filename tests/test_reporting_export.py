import json
import pathlib

import pytest

from overdrive_import.reporting import export


def test_write_batch_returns_public_url(tmp_path: pathlib.Path):
    url = export.write_batch(
        [{"id": "A"}], "1225", upload_dir=tmp_path, base_url="https://lib.example/uploads/"
    )
    path = tmp_path / "wpallimport" / "files" / "1225.json"
    assert url == "https://lib.example/uploads/wpallimport/files/1225.json"
    assert json.loads(path.read_text(encoding="utf8")) == [{"id": "A"}]


def test_batch_path_strips_query_and_directories(tmp_path: pathlib.Path):
    assert export.batch_path("../../1225?x=1", tmp_path).name == "1225.json"
    with pytest.raises(ValueError):
        export.batch_path("?only-query", tmp_path)


def test_remove_batch(tmp_path: pathlib.Path):
    export.write_batch([{"id": "A"}], 7, upload_dir=tmp_path, base_url="https://x")
    assert export.remove_batch(7, tmp_path) is True
    assert export.remove_batch(7, tmp_path) is False
