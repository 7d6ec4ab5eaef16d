from types import SimpleNamespace

from app.utils.menus import build_menu_tree


def make_menu(menu_id, parent_id=None, display_order=0, is_active=True):
    return SimpleNamespace(
        id=menu_id,
        code=menu_id,
        name=menu_id.title(),
        parent_id=parent_id,
        display_order=display_order,
        is_active=is_active,
        menu_metadata=None,
    )


def collect_ids(nodes):
    ids = []
    for node in nodes:
        ids.append(node.id)
        ids.extend(collect_ids(node.children))
    return ids


def test_siblings_sorted_by_display_order_at_every_depth():
    menus = [
        make_menu("shops", display_order=2),
        make_menu("dashboard", display_order=1),
        make_menu("shop-list", parent_id="shops", display_order=5),
        make_menu("shop-new", parent_id="shops", display_order=3),
        make_menu("shop-tags", parent_id="shops", display_order=4),
    ]

    tree = build_menu_tree(menus)

    assert [node.id for node in tree] == ["dashboard", "shops"]
    assert [node.id for node in tree[1].children] == ["shop-new", "shop-tags", "shop-list"]
    assert tree[0].children == []


def test_equal_display_order_keeps_input_order():
    menus = [
        make_menu("b", display_order=1),
        make_menu("a", display_order=1),
        make_menu("c", display_order=0),
    ]

    assert [node.id for node in build_menu_tree(menus)] == ["c", "b", "a"]


def test_orphans_are_dropped():
    menus = [
        make_menu("root"),
        make_menu("child", parent_id="root"),
        make_menu("orphan", parent_id="missing"),
        make_menu("orphan-child", parent_id="orphan"),
    ]

    tree = build_menu_tree(menus)

    assert collect_ids(tree) == ["root", "child"]


def test_cycles_never_make_a_node_its_own_descendant():
    menus = [
        make_menu("root"),
        make_menu("self", parent_id="self"),
        make_menu("loop-a", parent_id="loop-b"),
        make_menu("loop-b", parent_id="loop-a"),
    ]

    tree = build_menu_tree(menus)

    ids = collect_ids(tree)
    assert ids == ["root"]
    assert len(ids) == len(set(ids))


def test_empty_input_builds_empty_forest():
    assert build_menu_tree([]) == []
