import logging
from typing import Iterator, List, Optional, Tuple

from .css import rewrite_css_urls
from .dom import Node, new_node
from .errors import MissingElementError, NotFoundError, UnknownExtensionError
from .fetch import Fetcher
from .filters import has_attr, is_tag
from .mime import IMAGE_EXTS, data_uri, extension_of, subtype_for
from .pipeline import Stage, TransformContext
from .urls import resolve_ref, same_page_fragment

log = logging.getLogger(__name__)

# (tag, attribute) pairs made absolute, in this order
LINK_TARGETS = (
    ("link", "href"),
    ("a", "href"),
    ("script", "src"),
    ("img", "src"),
)

PRUNED_TAGS = ("style", "link", "script")


# -------------------- Links --------------------


def resolve_links(base_url: str) -> Stage:
    def _resolve_links(tree: Node, ctx: TransformContext) -> None:
        for tag, attr in LINK_TARGETS:
            for node in tree.find_all(is_tag(tag)):
                value, found = node.get_attr(attr)
                if not found:
                    continue
                absu = same_page_fragment(base_url, resolve_ref(base_url, value))
                node.delete_attr(attr)
                node.set_attr(attr, absu)

    return _resolve_links


# -------------------- Styles --------------------


def iter_styles(tree: Node, base_url: str, fetcher: Fetcher) -> Iterator[Tuple[str, str]]:
    """Yield (css, base) for every <style> and then every linked stylesheet."""
    for style in tree.find_all(is_tag("style")):
        yield style.text(), base_url
    for link in tree.find_all(is_tag("link"), has_attr("rel", "stylesheet")):
        href, found = link.get_attr("href")
        if not found:
            continue
        href = resolve_ref(base_url, href)
        log.debug("inline stylesheet %s", href)
        yield fetcher.download(href).decode("utf-8", errors="ignore"), href


def inline_styles(base_url: str, fetcher: Fetcher) -> Stage:
    def _inline_styles(tree: Node, ctx: TransformContext) -> None:
        blocks: List[str] = []
        for css, css_base in iter_styles(tree, base_url, fetcher):
            blocks.append(rewrite_css_urls(css, css_base, fetcher) + "\n")
        ctx.styles = "".join(blocks)

    return _inline_styles


def append_inlined_styles() -> Stage:
    def _append_inlined_styles(tree: Node, ctx: TransformContext) -> None:
        try:
            head = tree.find(is_tag("head"))
        except NotFoundError as e:
            raise MissingElementError("head") from e
        head.append_child(new_node("style", text=ctx.styles or ""))

    return _append_inlined_styles


# -------------------- Images --------------------


def effective_source(node: Node) -> Optional[str]:
    src, found = node.get_attr("src")
    if found:
        return src
    srcset, found = node.get_attr("srcset")
    if found:
        # last candidate, descriptor ("2x", "800w") dropped
        cand = srcset.split(",")[-1].strip()
        idx = cand.find(" ")
        if idx > 0:
            cand = cand[:idx].strip()
        return cand
    return None


def is_image_source(node: Node) -> bool:
    typ, found = node.get_attr("type")
    if found and typ.startswith("image/"):
        return True
    src = effective_source(node)
    if not src:
        return False
    try:
        return extension_of(src) in IMAGE_EXTS
    except UnknownExtensionError:
        return False


def inline_image(node: Node, base_url: str, fetcher: Fetcher) -> None:
    src = effective_source(node)
    if not src or src.startswith("data:"):
        return
    url = resolve_ref(base_url, src)
    if url == base_url:
        # an empty src resolves to the page itself
        return
    subtype = subtype_for(extension_of(url))
    log.debug("inline image %s", url)
    new_src = data_uri("image", subtype, fetcher.download_base64(url))
    node.delete_attr("src")
    node.delete_attr("srcset")
    node.set_attr("src", new_src)


def inline_images(base_url: str, fetcher: Fetcher) -> Stage:
    def _inline_images(tree: Node, ctx: TransformContext) -> None:
        nodes = list(tree.find_all(is_tag("img")))
        nodes.extend(n for n in tree.find_all(is_tag("source")) if is_image_source(n))
        for n in nodes:
            inline_image(n, base_url, fetcher)

    return _inline_images


# -------------------- Pruning --------------------


def remove_tags(*tags: str) -> Stage:
    def _remove_tags(tree: Node, ctx: TransformContext) -> None:
        for tag in tags:
            tree.remove_all(is_tag(tag))

    return _remove_tags


def default_stages(base_url: str, fetcher: Fetcher) -> List[Tuple[str, Stage]]:
    return [
        ("resolve links", resolve_links(base_url)),
        ("inline styles", inline_styles(base_url, fetcher)),
        ("inline images", inline_images(base_url, fetcher)),
        ("remove tags", remove_tags(*PRUNED_TAGS)),
        ("append inlined styles", append_inlined_styles()),
    ]
