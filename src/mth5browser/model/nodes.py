"""
Tree Node Schema
================
This module defines the uniform records produced by digesting an HDF5 file.

Why is this file needed?
------------------------
1. Uniformity: The structure-only loader and the full-read exporter build the
   same node type, so the views never need to check which one produced a tree.
2. Decoupling: The widget tree stores a small `TreeItemData` payload on every
   item instead of holding on to h5py objects (which die with the file).

Classes:
    AttributeEntry: One attribute of a group or dataset.
    DatasetMeta: Shape and datatype class of a dataset.
    H5Node: A group or dataset, with attributes and children.
    TreeItemData: Payload attached to each item of the browser tree.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

GROUP = "group"
DATASET = "dataset"
ATTRIBUTE = "attribute"


@dataclass
class AttributeEntry:
    name: str
    value: Any = None
    path: str = ""
    read_ok: bool = False
    read_error: str = ""


@dataclass
class DatasetMeta:
    size: Optional[tuple[int, ...]] = None
    dtype_class: str = ""
    ndims: Optional[int] = None
    is_compound: bool = False


@dataclass
class H5Node:
    type: str
    name: str
    path: str
    attrs: list[AttributeEntry] = field(default_factory=list)
    children: list[H5Node] = field(default_factory=list)
    meta: Optional[DatasetMeta] = None

    # Only populated by the full-read exporter
    data: Any = None
    read_ok: Optional[bool] = None
    read_error: str = ""

    # Set on the root of a loaded tree so selection callbacks can re-open the file
    file: Optional[str] = None

    @property
    def is_group(self) -> bool:
        return self.type == GROUP

    @property
    def is_dataset(self) -> bool:
        return self.type == DATASET

    def walk(self) -> Iterator[H5Node]:
        """Pre-order traversal of this node and all descendants."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, path: str) -> Optional[H5Node]:
        """Return the descendant with the given HDF5 path, if any."""
        for node in self.walk():
            if node.path == path:
                return node
        return None


@dataclass(frozen=True)
class ResolvedReference:
    """An HDF5 object reference turned into the path it pointed to (None if dangling)."""
    path: Optional[str] = None

    def __str__(self) -> str:
        return f"<ref {self.path or '(null)'}>"


@dataclass
class TreeItemData:
    """What a tree item knows about the HDF5 object it stands for."""
    kind: str
    path: str = ""
    name: str = ""
    owner_path: str = ""
    value: Any = None
    meta: Optional[DatasetMeta] = None


def sort_children(children: list[H5Node]) -> list[H5Node]:
    """Groups first, then datasets; case-insensitive by name within each."""
    return sorted(children, key=lambda c: (not c.is_group, c.name.lower()))
