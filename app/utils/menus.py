"""Menus 유틸리티 모듈.

평면 메뉴 목록을 display_order 로 정렬된 트리(forest)로 변환합니다.
"""

from typing import Iterable

from app.models.menus import Menu
from app.schemas.menus import MenuNode


def build_menu_tree(menus: Iterable[Menu]) -> list[MenuNode]:
    """메뉴 목록을 트리 구조로 변환합니다.

    상위 메뉴가 입력 목록에 없는 메뉴는 버려지며, 루트에서 도달할 수 있는 노드만 결과에 포함되므로
    순환 참조가 있는 데이터도 자기 자신의 하위 노드로 나타나지 않습니다.
    모든 형제 목록은 display_order 오름차순으로 안정 정렬됩니다.

    Args:
        menus (Iterable[Menu]): 평면 메뉴 목록

    Returns:
        list[MenuNode]: 루트 메뉴 노드 목록
    """
    # 빠른 검색을 위한 딕셔너리
    nodes: dict[str, MenuNode] = {}
    for menu in menus:
        nodes[menu.id] = MenuNode.model_validate(menu)

    roots: list[MenuNode] = []
    children: dict[str, list[MenuNode]] = {}
    for node in nodes.values():
        if node.parent_id is None:
            roots.append(node)
        elif node.parent_id in nodes and node.parent_id != node.id:
            children.setdefault(node.parent_id, []).append(node)

    visited: set[str] = set()

    def attach(siblings: list[MenuNode]) -> list[MenuNode]:
        attached = []
        for node in sorted(siblings, key=lambda n: n.display_order):
            if node.id in visited:
                continue
            visited.add(node.id)
            node.children = attach(children.get(node.id, []))
            attached.append(node)
        return attached

    return attach(roots)
