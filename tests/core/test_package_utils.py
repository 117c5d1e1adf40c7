import zipfile
from datetime import date

import pytest

from otzaria_toolkit.core import package_utils
from otzaria_toolkit.core.models import Document, DocumentStore


@pytest.fixture
def input_tree(tmp_path):
    root = tmp_path / "in"
    (root / "sub").mkdir(parents=True)
    (root / "b.txt").write_text("<h1>ב</h1>", encoding="utf-8")
    (root / "a.txt").write_text("<p>a</p>", encoding="utf-8")
    (root / "sub" / "c.html").write_text("<p>c</p>", encoding="utf-8")
    return root


def test_folders_walked_in_sorted_order(input_tree):
    docs = package_utils.load_documents([input_tree])
    assert [d.name for d in docs] == ["a", "b", "c"]
    assert [d.original_name for d in docs] == ["a.txt", "b.txt", "c.html"]
    assert docs[1].body == "<h1>ב</h1>"


def test_single_file_and_missing_path(input_tree):
    assert len(package_utils.load_documents([input_tree / "a.txt"])) == 1
    with pytest.raises(FileNotFoundError):
        package_utils.load_documents([input_tree / "nope.txt"])


def test_export_entries_in_store_order():
    store = DocumentStore((Document("z", "1"), Document("a", "2")))
    assert package_utils.export_entries(store) == [("z.txt", "1"), ("a.txt", "2")]
    assert package_utils.export_entries(store, ".md")[0][0] == "z.md"


def test_archive_name():
    assert package_utils.archive_name(on=date(2026, 3, 4)) == "Otzaria_Output_2026-03-04.zip"


def test_save_zip_archive(tmp_path):
    store = DocumentStore((Document("ספר", "<h1>שלום</h1>"),))
    path = package_utils.save_zip_archive(store, tmp_path, on=date(2026, 3, 4))
    assert path == tmp_path / "Otzaria_Output_2026-03-04.zip"
    with zipfile.ZipFile(path) as zf:
        assert zf.read("ספר.txt").decode("utf-8") == "<h1>שלום</h1>"


def test_save_zip_archive_empty_store(tmp_path):
    assert package_utils.save_zip_archive(DocumentStore(), tmp_path) is None
    assert list(tmp_path.iterdir()) == []
