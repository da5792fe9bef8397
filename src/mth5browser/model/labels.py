"""Text and ordering rules for items shown in the browser tree."""
from typing import Any

from mth5browser.model.nodes import AttributeEntry, DATASET, GROUP, H5Node
from mth5browser.model.paths import join_num, safe_text


def dataset_label(node: H5Node) -> str:
    """Build the dataset label, e.g. 'ex [4096] <H5T_FLOAT>'."""
    name = safe_text(node.name)

    size_str = ""
    meta = node.meta
    if meta is not None and meta.size:
        size_str = f" [{join_num(meta.size, 'x')}]"

    cls_str = ""
    if meta is not None and meta.dtype_class:
        cls_str = f" <{safe_text(meta.dtype_class)}>"

    return f"{name}{size_str}{cls_str}"


def attribute_label(name: Any, value: Any = None) -> str:
    # The value is kept out of the label to keep the tree readable
    return safe_text(name)


def sorted_attributes(attrs: list[AttributeEntry]) -> list[AttributeEntry]:
    return sorted(attrs, key=lambda a: safe_text(a.name).lower())


def display_order(children: list[H5Node]) -> list[H5Node]:
    """
    Order children by what the user sees: the lower-cased name.

    Groups and datasets are interleaved; nodes of unknown type go first.
    """
    def key(child: H5Node) -> str:
        if child.type in (GROUP, DATASET):
            return safe_text(child.name).lower()
        return ""

    return sorted(children, key=key)
