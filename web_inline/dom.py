import logging
from typing import BinaryIO, Dict, Iterator, List, Optional, Tuple, Union

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PageElement, PreformattedString, Tag

from .errors import NotFoundError, ParseError
from .filters import NodeFilter, matches

log = logging.getLogger(__name__)

# Every attribute value stays a plain string ("class" and "rel" included).
_BUILDER_OPTS = {"multi_valued_attributes": None}

_factory = BeautifulSoup("", "html.parser", **_BUILDER_OPTS)


# -------------------- Parse / build --------------------


def parse(markup: Union[str, bytes], parser: str = "lxml") -> "Node":
    try:
        soup = BeautifulSoup(markup, parser, **_BUILDER_OPTS)
    except Exception as e:
        log.debug("parser %s failed (%s), falling back to html.parser", parser, e)
        try:
            soup = BeautifulSoup(markup, "html.parser", **_BUILDER_OPTS)
        except Exception as e2:
            raise ParseError(f"parse HTML: {e2}") from e2
    return Node(soup)


def new_node(tag: str, attrs: Optional[Dict[str, str]] = None, text: str = "") -> "Node":
    el = _factory.new_tag(tag, attrs=dict(attrs or {}))
    if text:
        el.append(NavigableString(text))
    return Node(el)


# -------------------- Node --------------------


class Node:
    """A view over one element or text unit of a parsed document.

    Wrappers are cheap and created on demand; two wrappers are equal when
    they point at the same underlying element.
    """

    __slots__ = ("_el", "void")

    def __init__(self, el: PageElement):
        self._el = el
        # set when the root itself was removed; a void node renders as ""
        self.void = False

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Node) and other._el is self._el

    def __hash__(self) -> int:
        return id(self._el)

    def __repr__(self) -> str:
        if self.is_text():
            return f"<Node text={str(self._el)[:20]!r}>"
        return f"<Node {self.tag() or '#document'}>"

    def _tag(self) -> Tag:
        if not isinstance(self._el, Tag):
            raise TypeError("text nodes have no attributes or children")
        return self._el

    # ---- read ----

    def is_text(self) -> bool:
        return isinstance(self._el, NavigableString)

    def tag(self) -> str:
        if isinstance(self._el, BeautifulSoup) or not isinstance(self._el, Tag):
            return ""
        return self._el.name

    def text(self) -> str:
        if isinstance(self._el, NavigableString):
            return str(self._el)
        first = self._el.contents[0] if self._el.contents else None
        if isinstance(first, NavigableString) and not isinstance(first, PreformattedString):
            return str(first)
        return ""

    def get_attr(self, name: str) -> Tuple[str, bool]:
        if not isinstance(self._el, Tag):
            return "", False
        attrs = self._el.attrs
        if name not in attrs:
            return "", False
        v = attrs[name]
        if isinstance(v, list):
            v = " ".join(v)
        return ("" if v is None else v), True

    def attrs(self) -> List[Tuple[str, str]]:
        if not isinstance(self._el, Tag):
            return []
        return [(k, self.get_attr(k)[0]) for k in self._el.attrs]

    def children(self) -> List["Node"]:
        if not isinstance(self._el, Tag):
            return []
        return [Node(c) for c in self._el.contents]

    def parent(self) -> Optional["Node"]:
        p = self._el.parent
        return Node(p) if p is not None else None

    # ---- write ----

    def set_attr(self, name: str, value: str) -> None:
        # attribute names are unique; setting an existing name replaces it
        self._tag()[name] = value

    def delete_attr(self, name: str) -> None:
        el = self._tag()
        if name in el.attrs:
            del el[name]

    def append_child(self, child: "Node") -> None:
        self._tag().append(child._el)

    # ---- query ----

    def find_all(self, *filters: NodeFilter) -> Iterator["Node"]:
        """Depth-first, pre-order walk yielding matching nodes, self included."""
        if self.void:
            return
        stack: List[Node] = [self]
        while stack:
            node = stack.pop()
            if matches(node, filters):
                yield node
            stack.extend(reversed(node.children()))

    def find(self, *filters: NodeFilter) -> "Node":
        for node in self.find_all(*filters):
            return node
        raise NotFoundError()

    def remove_all(self, *filters: NodeFilter) -> None:
        for node in list(self.find_all(*filters)):
            if node._el.parent is None:
                node.void = True
            else:
                node._el.extract()

    # ---- serialize ----

    def render_string(self) -> str:
        if self.void:
            return ""
        if isinstance(self._el, Tag):
            return self._el.decode(formatter="html")
        return self._el.output_ready(formatter="html")

    def render(self, sink: BinaryIO, encoding: str = "utf-8") -> None:
        sink.write(self.render_string().encode(encoding))
