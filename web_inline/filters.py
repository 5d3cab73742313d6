"""Node predicates used to select parts of a document.

A filter is any callable taking a node and returning a bool. Queries that
receive several filters require all of them to hold; there is no "or",
callers run one query per alternative and merge the results.
"""

from typing import TYPE_CHECKING, Callable, Iterable

if TYPE_CHECKING:
    from .dom import Node

NodeFilter = Callable[["Node"], bool]


def matches(node: "Node", filters: Iterable[NodeFilter]) -> bool:
    for f in filters:
        if not f(node):
            return False
    return True


def all_of(*filters: NodeFilter) -> NodeFilter:
    def _all(node: "Node") -> bool:
        return matches(node, filters)

    return _all


def not_(f: NodeFilter) -> NodeFilter:
    def _not(node: "Node") -> bool:
        return not f(node)

    return _not


def is_tag(tag: str) -> NodeFilter:
    def _is_tag(node: "Node") -> bool:
        return node.tag() == tag

    return _is_tag


def has_attr_matching(name: str, pred: Callable[[str], bool]) -> NodeFilter:
    def _has_attr_matching(node: "Node") -> bool:
        value, found = node.get_attr(name)
        if not found:
            return False
        return pred(value)

    return _has_attr_matching


def has_attr(name: str, value: str) -> NodeFilter:
    return has_attr_matching(name, lambda v: v == value)


def has_id(id_: str) -> NodeFilter:
    return has_attr("id", id_)


def has_class(cls: str) -> NodeFilter:
    return has_attr_matching("class", lambda v: cls in v.split(" "))
