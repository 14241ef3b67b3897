from app.services.category_tree import build_category_tree


def _category(cid, name, parent=None):
    return {"id": cid, "name": name, "parentId": parent}


def _count_nodes(nodes):
    return sum(1 + _count_nodes(node.get("children", [])) for node in nodes)


class TestBuildCategoryTree:
    """Tests for nesting a flat category list by parent reference."""

    def test_empty(self):
        assert build_category_tree([]) == []

    def test_roots_sorted_by_name(self):
        tree = build_category_tree(
            [_category("b", "Necklaces"), _category("a", "Earrings"), _category("c", "Rings")]
        )

        assert [node["name"] for node in tree] == ["Earrings", "Necklaces", "Rings"]

    def test_children_nested_and_sorted(self):
        tree = build_category_tree(
            [
                _category("r", "Rings"),
                _category("s", "Silver Rings", parent="r"),
                _category("g", "Gold Rings", parent="r"),
                _category("w", "White Gold", parent="g"),
            ]
        )

        assert len(tree) == 1
        rings = tree[0]
        assert [child["name"] for child in rings["children"]] == ["Gold Rings", "Silver Rings"]
        gold = rings["children"][0]
        assert gold["children"][0]["id"] == "w"

    def test_leaf_has_no_children_key(self):
        tree = build_category_tree([_category("r", "Rings"), _category("g", "Gold", parent="r")])

        assert "children" not in tree[0]["children"][0]

    def test_orphans_are_omitted(self):
        """Entries whose parent is missing from the input do not appear."""
        tree = build_category_tree(
            [
                _category("r", "Rings"),
                _category("o", "Orphan", parent="missing"),
                _category("x", "Orphan Child", parent="o"),
            ]
        )

        assert _count_nodes(tree) == 1
        assert tree[0]["id"] == "r"

    def test_every_reachable_node_appears_once(self):
        categories = [
            _category("1", "A"),
            _category("2", "B", parent="1"),
            _category("3", "C", parent="1"),
            _category("4", "D", parent="3"),
            _category("5", "E"),
        ]

        tree = build_category_tree(categories)

        assert _count_nodes(tree) == len(categories)

    def test_input_not_mutated(self):
        categories = [_category("r", "Rings"), _category("g", "Gold", parent="r")]

        build_category_tree(categories)

        assert all("children" not in c for c in categories)
