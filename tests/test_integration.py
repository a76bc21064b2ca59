import json
import threading
import pytest

from drama_api.repo import JsonFileRepo
from drama_api.service import DramaService, NotFoundError
from drama_api.query import DramaQuery

# --- Fixtures ------------------------------------------------------------

@pytest.fixture
def data_path(tmp_path):
    """Temporary catalog file path (not created yet)"""
    return tmp_path / "store" / "data.json"

@pytest.fixture
def repo(data_path):
    return JsonFileRepo(str(data_path))

@pytest.fixture
def svc(repo):
    return DramaService(repo)

def read_doc(path):
    return json.loads(path.read_text(encoding="utf-8"))

# --- Store ---------------------------------------------------------------

def test_load_initializes_missing_file(repo, data_path):
    assert not data_path.exists()
    assert repo.load() == []
    assert read_doc(data_path) == {"dramas": []}

def test_load_initializes_empty_file(repo, data_path):
    data_path.write_text("", encoding="utf-8")
    assert repo.load() == []
    assert read_doc(data_path) == {"dramas": []}

def test_document_without_collection_loads_empty(repo, data_path):
    data_path.write_text("{}", encoding="utf-8")
    assert repo.load() == []

def test_replace_round_trip_keeps_order_and_unicode(repo, data_path):
    dramas = [{"id": "2", "title": "琅琊榜"}, {"id": "1", "title": "Nirvana"}]
    repo.replace(dramas)
    assert repo.load() == dramas
    text = data_path.read_text(encoding="utf-8")
    assert "琅琊榜" in text
    assert text.startswith('{\n  "dramas"')

def test_replace_leaves_no_temp_files(repo, data_path):
    repo.replace([{"id": "x"}])
    repo.replace([{"id": "y"}])
    assert [p.name for p in data_path.parent.iterdir()] == ["data.json"]

# --- Service over the file store -----------------------------------------

def test_create_persists_and_prepends(svc, data_path):
    first = svc.create_drama({"title": "First"})
    second = svc.create_drama({"title": "Second"})
    stored = read_doc(data_path)["dramas"]
    assert [d["id"] for d in stored] == [second["id"], first["id"]]

def test_update_merges_and_persists(svc, data_path):
    d = svc.create_drama({"title": "A", "year": 2020})
    updated = svc.update_drama(d["id"], {"year": 2021})
    assert updated["title"] == "A" and updated["year"] == 2021
    assert updated["updated_at"] > d["updated_at"]
    assert updated["created_at"] == d["created_at"]
    assert read_doc(data_path)["dramas"][0]["year"] == 2021

def test_delete_then_get_raises(svc):
    d = svc.create_drama({"title": "Gone"})
    assert svc.delete_drama(d["id"]) == 1
    with pytest.raises(NotFoundError):
        svc.get_drama(d["id"])
    assert svc.delete_drama(d["id"]) == 0

def test_seed_prepends_in_generated_order(svc):
    existing = svc.create_drama({"title": "Existing"})
    assert svc.seed_dramas(3) == 3
    stored = svc.repo.load()
    assert [d["title"] for d in stored] == ["Sample C-Drama 1", "Sample C-Drama 2", "Sample C-Drama 3", "Existing"]
    assert len({d["id"] for d in stored}) == 4
    assert stored[-1]["id"] == existing["id"]

def test_seed_zero_adds_nothing(svc):
    assert svc.seed_dramas(0) == 0
    assert svc.list_dramas()["total"] == 0

def test_list_reads_fresh_state_from_disk(svc, data_path):
    svc.create_drama({"title": "Mine"})
    doc = read_doc(data_path)
    doc["dramas"].append({"id": "external", "title": "Written elsewhere", "updated_at": "2000-01-01"})
    data_path.write_text(json.dumps(doc), encoding="utf-8")
    res = svc.list_dramas(DramaQuery(sort="title:asc"))
    assert [d["title"] for d in res["items"]] == ["Mine", "Written elsewhere"]

def test_concurrent_creates_in_one_process_are_not_lost(svc):
    threads = [threading.Thread(target=svc.create_drama, args=({"title": f"T{i}"},)) for i in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    dramas = svc.repo.load()
    assert len(dramas) == 10
    assert len({d["id"] for d in dramas}) == 10
