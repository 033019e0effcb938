import pytest

from studio.collection import CollectionManager
from studio.errors import UnknownImageError
from studio.models import GeneratedImage


def image(label):
    return GeneratedImage(id=label, url="data:image/png;base64,AAAA", prompt=label, timestamp=0)


@pytest.fixture
def gallery():
    manager = CollectionManager()
    for label in ("a", "b", "c", "d"):
        manager.append(image(label))
    return manager


def test_first_append_sets_preview():
    manager = CollectionManager()
    manager.append(image("a"))
    manager.append(image("b"))
    assert manager.preview_id == "a"
    assert [i.id for i in manager.items] == ["a", "b"]


def test_delete_previewed_image_moves_preview_to_first(gallery):
    gallery.set_preview("c")
    gallery.delete("c")
    assert gallery.preview_id == "a"

    gallery.delete("a")
    assert gallery.preview_id == "b"


def test_delete_last_image_clears_preview():
    manager = CollectionManager()
    manager.append(image("a"))
    manager.delete("a")
    assert manager.preview_id is None
    assert len(manager) == 0


def test_delete_other_image_keeps_preview(gallery):
    gallery.delete("b")
    assert gallery.preview_id == "a"


def test_delete_drops_id_from_selection(gallery):
    gallery.toggle_select("b")
    gallery.toggle_select("c")
    gallery.delete("b")
    assert gallery.selected == {"c"}


def test_delete_unknown_image(gallery):
    with pytest.raises(UnknownImageError):
        gallery.delete("zzz")


def test_bulk_delete(gallery):
    gallery.toggle_select("a")
    gallery.toggle_select("c")
    removed = gallery.bulk_delete()

    assert removed == 2
    assert [i.id for i in gallery.items] == ["b", "d"]
    assert gallery.preview_id == "b"
    assert gallery.selected == set()


def test_bulk_delete_everything(gallery):
    gallery.select_all()
    gallery.bulk_delete()
    assert gallery.items == []
    assert gallery.preview_id is None
    assert gallery.selected == set()


def test_bulk_delete_keeps_unselected_preview(gallery):
    gallery.set_preview("d")
    gallery.toggle_select("a")
    gallery.bulk_delete()
    assert gallery.preview_id == "d"


def test_toggle_select(gallery):
    gallery.toggle_select("b")
    assert gallery.selected == {"b"}
    gallery.toggle_select("b")
    assert gallery.selected == set()


def test_toggle_select_ignores_stale_id(gallery):
    gallery.toggle_select("gone")
    assert gallery.selected == set()


def test_select_all_toggles(gallery):
    gallery.toggle_select("a")
    gallery.select_all()
    assert gallery.selected == {"a", "b", "c", "d"}
    gallery.select_all()
    assert gallery.selected == set()


def test_select_all_on_empty_collection():
    manager = CollectionManager()
    manager.select_all()
    assert manager.selected == set()


def test_set_preview_unknown(gallery):
    with pytest.raises(UnknownImageError):
        gallery.set_preview("nope")
    assert gallery.preview_id == "a"


def test_export_plan_follows_collection_order(gallery):
    gallery.toggle_select("d")
    gallery.toggle_select("b")
    plan = gallery.export_plan()
    assert [(name, item.id) for name, item in plan] == [
        ("studio-export-1.png", "b"),
        ("studio-export-2.png", "d"),
    ]
    assert gallery.selected_ids() == ["b", "d"]


def test_clear(gallery):
    gallery.toggle_select("a")
    gallery.clear()
    assert gallery.items == []
    assert gallery.selected == set()
    assert gallery.preview_id is None
