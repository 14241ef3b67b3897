"""
Построение дерева категорий из плоского списка.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence


def build_category_tree(
    categories: Sequence[Mapping[str, Any]],
    id_key: str = "id",
    parent_key: str = "parentId",
) -> List[Dict[str, Any]]:
    """
    Собрать вложенную иерархию категорий по ссылке на родителя.

    Корни - записи без родителя. У узла ключ ``children`` появляется только
    если у него есть дочерние категории. На каждом уровне узлы отсортированы
    по имени. Записи, чей родитель отсутствует во входном списке, в дерево
    не попадают. Граф считается ацикличным (это обеспечивают проверки при записи).

    Args:
        categories: Плоский список категорий (словари)
        id_key: Ключ идентификатора
        parent_key: Ключ ссылки на родителя

    Returns:
        List[Dict[str, Any]]: Корневые узлы с вложенными children
    """
    ordered = sorted(categories, key=lambda c: c.get("name") or "")

    by_parent: Dict[Optional[str], List[Mapping[str, Any]]] = {}
    for category in ordered:
        parent_id = category.get(parent_key) or None
        by_parent.setdefault(parent_id, []).append(category)

    def _branch(parent_id: Optional[str]) -> List[Dict[str, Any]]:
        nodes = []
        for category in by_parent.get(parent_id, []):
            node = dict(category)
            children = _branch(node[id_key])
            if children:
                node["children"] = children
            nodes.append(node)
        return nodes

    return _branch(None)
