"""mlform – Nested repeater tests."""

import pytest

from mlform.core.tree import Node, to_tree
from mlform.widgets.repeater import NestedRepeater, flatten


@pytest.fixture
def repeater(en_items) -> NestedRepeater:
    return NestedRepeater("blocks", "Post", en_items)


class TestItems:
    def test_initial_items(self, repeater, en_items) -> None:
        assert len(repeater.items) == 2
        assert repeater.current_tree().to_data() == en_items

    def test_rebuild_replaces_collection(self, repeater) -> None:
        old_items = repeater.items
        repeater.init_items_from(to_tree([{"title": "Only"}]))
        assert repeater.items is not old_items
        assert repeater.current_tree().to_data() == [{"title": "Only"}]

    def test_empty_items_are_dropped(self, repeater) -> None:
        repeater.init_items_from(to_tree([{"title": "a"}, {}, None, {"title": "b"}]))
        assert [item.index for item in repeater.items] == [0, 1]
        assert repeater.current_tree().to_data() == [{"title": "a"}, {"title": "b"}]

    def test_rebuild_from_empty_tree(self, repeater) -> None:
        repeater.init_items_from(Node())
        assert repeater.items == []
        assert repeater.current_tree() == Node()

    def test_add_remove_move(self, repeater) -> None:
        repeater.add_item({"title": "Third", "qty": 1})
        repeater.move_item(2, 0)
        assert [item.value["title"].value for item in repeater.items] == ["Third", "Hello", "World"]
        repeater.remove_item(1)
        assert repeater.current_tree().to_data() == [{"title": "Third", "qty": 1}, {"title": "World", "qty": 5}]
        assert [item.index for item in repeater.items] == [0, 1]

    def test_remove_out_of_range(self, repeater) -> None:
        with pytest.raises(IndexError):
            repeater.remove_item(5)


class TestRendering:
    def test_flatten_nested(self) -> None:
        tree = to_tree({"title": "x", "links": [{"url": "/a"}]})
        assert flatten(tree, "Post[blocks][0]") == [
            ("Post[blocks][0][title]", "x"),
            ("Post[blocks][0][links][0][url]", "/a"),
        ]

    def test_render_inputs(self, repeater) -> None:
        html = repeater.render()
        assert 'id="nestedform-Post-blocks-items"' in html
        assert 'name="Post[blocks][0][title]" value="Hello"' in html
        assert 'name="Post[blocks][0][qty]" value="0"' in html
        assert 'name="Post[blocks][1][qty]" value="5"' in html

    def test_render_escapes_values(self) -> None:
        html = NestedRepeater("blocks", "Post", [{"title": "<script>x</script>"}]).render()
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_render_empty(self) -> None:
        assert "No items" in NestedRepeater("blocks", "Post").render()

    def test_nested_field_name(self) -> None:
        repeater = NestedRepeater("content[blocks]", "Page", [{"title": "x"}])
        assert repeater.form_field_name == "Page[content][blocks]"
        assert repeater.get_id("items") == "nestedform-Page-content-blocks-items"
