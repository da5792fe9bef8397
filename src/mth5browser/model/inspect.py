"""
Selection Queries
=================
Answers the questions the info panel asks when the user selects a tree item.

Why is this file needed?
------------------------
1. Freshness: Counts and shapes are re-queried from the file on selection
   rather than trusted from the cached tree.
2. Testability: The view only renders the returned text lines and arrays, so
   every rule here can be tested without a running Qt application.

Functions:
    describe_item: Info panel lines for any TreeItemData.
    read_for_plot: Downsampled dataset read for the quick-look plot.
    preview_value: Compact, never-raising text preview of a value.
    resolve_reference: Best-effort dereference of an HDF5 object reference.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

import h5py
import numpy as np

from mth5browser.config import ATTR_PREVIEW_CHARS, MAX_PLOT_POINTS, PLOT_BLOCK_SIZE
from mth5browser.model.io import dtype_class_name, iter_members
from mth5browser.model.nodes import ATTRIBUTE, DATASET, GROUP, ResolvedReference, TreeItemData
from mth5browser.model.paths import join_num, safe_text, tail_name

logger = logging.getLogger(__name__)


def describe_item(file: Optional[str], item: Optional[TreeItemData]) -> list[str]:
    """Info panel lines for the selected tree item."""
    if item is None or not getattr(item, "kind", ""):
        return ["No NodeData."]

    if not file:
        return [
            "File path missing.",
            "Open a file before selecting items.",
        ]

    kind = safe_text(item.kind).lower()

    if kind == GROUP:
        return describe_group(file, item.path)

    if kind == ATTRIBUTE:
        return describe_attribute(file, item.owner_path, item.name, item.value)

    if kind == DATASET:
        return describe_dataset(file, item.path)

    return [f"Unknown node type: {safe_text(item.kind)}"]


def describe_group(file: str, path: str) -> list[str]:
    path = safe_text(path)

    with h5py.File(file, "r") as f:
        group = f[path]
        n_groups = 0
        n_datasets = 0
        for _, obj in iter_members(group):
            if isinstance(obj, h5py.Group):
                n_groups += 1
            else:
                n_datasets += 1
        n_attrs = len(group.attrs)

    return [
        "TYPE: group",
        f"PATH: {path}",
        f"GROUPS  : {n_groups}",
        f"DATASETS: {n_datasets}",
        f"ATTRS   : {n_attrs}",
    ]


def describe_dataset(file: str, path: str) -> list[str]:
    path = safe_text(path)

    with h5py.File(file, "r") as f:
        dset = f[path]

        size_str = "[]"
        try:
            if dset.shape is not None:
                size_str = f"[{join_num(dset.shape, 'x')}]"
        except Exception as e:
            logger.debug(f"No shape for {path}: {e}")

        dtype = "<unknown>"
        try:
            dtype = dtype_class_name(dset)
        except Exception as e:
            logger.debug(f"No datatype class for {path}: {e}")

        n_attrs = len(dset.attrs)

    return [
        "TYPE: dataset",
        f"PATH : {path}",
        f"SIZE : {size_str}",
        f"DTYPE: {dtype}",
        f"ATTRS: {n_attrs}",
    ]


def describe_attribute(file: str, owner_path: str, name: str, value: Any = None) -> list[str]:
    lines = [
        "TYPE: attribute",
        f"OWNER: {safe_text(owner_path)}",
        f"NAME : {safe_text(name)}",
        f"VALUE: {preview_value(value, ATTR_PREVIEW_CHARS)}",
    ]

    if is_object_reference(value):
        ok, ref_path, ref_info = resolve_reference(file, value)
        if ok:
            lines.append(f"REF -> {ref_path}")
            lines.extend(ref_info)
        else:
            lines.append("REF -> (could not resolve in this HDF5 build)")

    return lines


# ---- VALUE PREVIEW ----

def preview_value(value: Any, max_chars: int = 200) -> str:
    """Safe, compact preview of an attribute value."""
    try:
        out = _preview(value, max_chars)
    except Exception:
        out = "<unprintable>"

    if len(out) > max_chars:
        out = out[:max_chars] + "..."
    return out


def _preview(value: Any, max_chars: int) -> str:
    if isinstance(value, str):
        return value

    if isinstance(value, (bytes, np.bytes_)):
        return safe_text(value)

    if isinstance(value, (bool, int, float, complex, np.bool_, np.number)):
        return _format_scalar(value)

    if isinstance(value, np.void):
        if value.dtype.names:
            return "struct fields: " + ", ".join(value.dtype.names)
        return f"<{type(value).__name__}>"

    if isinstance(value, np.ndarray):
        if value.dtype.names:
            return "struct fields: " + ", ".join(value.dtype.names)

        if value.dtype.kind in "biufc":
            if value.size == 0:
                return ""
            if value.size == 1:
                return _format_scalar(value.reshape(-1)[0])
            return f"{value.dtype} [{join_num(value.shape, 'x')}] ..."

        return _preview(value.tolist() if value.ndim else value.item(), max_chars)

    if isinstance(value, (list, tuple)):
        if len(value) == 0:
            return "list[]"
        if len(value) == 1:
            return f"list[1]: {_preview(value[0], max_chars)}"
        return f"list[{len(value)}]"

    if isinstance(value, Mapping):
        return "struct fields: " + ", ".join(safe_text(k) for k in value.keys())

    if isinstance(value, ResolvedReference):
        return str(value)

    return f"<{type(value).__name__}>"


def _format_scalar(value: Any) -> str:
    if isinstance(value, (bool, np.bool_)):
        return str(bool(value))
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    if isinstance(value, (float, np.floating)):
        return f"{float(value):.5g}"
    return str(value)


# ---- QUICK-LOOK READ ----

def read_for_plot(
    file: str,
    path: str,
    max_points: int = MAX_PLOT_POINTS,
    block_size: int = PLOT_BLOCK_SIZE,
) -> np.ndarray:
    """
    Read a dataset for plotting using stride/downsampling.

    - 1-D datasets: read <= ~max_points values with a constant stride
    - N-D datasets: read the leading block (up to `block_size` per dimension)
      and flatten it
    """
    with h5py.File(file, "r") as f:
        dset = f[safe_text(path)]
        shape = dset.shape

        # Null dataspace or scalar
        if not shape:
            return np.empty(0)

        if len(shape) == 1:
            n = int(shape[0])
            if n <= max_points:
                return np.asarray(dset[()])

            stride = max(1, n // max_points)
            logger.debug(f"Reading {path} with stride {stride} ({n} elements)")
            return np.asarray(dset[::stride])

        block = tuple(slice(0, min(int(s), block_size)) for s in shape)
        return np.asarray(dset[block]).ravel()


# ---- OBJECT REFERENCES ----

def _single_reference(value: Any) -> Optional[h5py.Reference]:
    if isinstance(value, h5py.Reference):
        return value
    if isinstance(value, np.ndarray) and value.dtype == object and value.size == 1:
        item = value.reshape(-1)[0]
        if isinstance(item, h5py.Reference):
            return item
    return None


def is_object_reference(value: Any) -> bool:
    """True for an HDF5 object reference (or a one-element array holding one)."""
    try:
        return _single_reference(value) is not None
    except Exception:
        return False


def resolve_reference(file: str, ref: Any) -> tuple[bool, str, list[str]]:
    """
    Best-effort resolver for HDF5 object references.

    Returns (ok, path, info_lines); ok is False when the reference cannot be
    dereferenced in this file.
    """
    ref = _single_reference(ref)
    if ref is None or not ref:
        return False, "", []

    try:
        with h5py.File(file, "r") as f:
            obj = f[ref]
            ref_path = obj.name or "<resolved object (name unavailable)>"

            ref_info: list[str] = []
            if ref_path.startswith("/"):
                if isinstance(obj, h5py.Group):
                    ref_type = "Group"
                elif isinstance(obj, h5py.Dataset):
                    ref_type = "Dataset"
                else:
                    ref_type = type(obj).__name__

                ref_info = [
                    f"REF TYPE: {ref_type}",
                    f"REF NAME: {tail_name(ref_path)}",
                ]

                if isinstance(obj, h5py.Dataset) and obj.shape is not None:
                    ref_info.append(f"REF SIZE: [{join_num(obj.shape, 'x')}]")

        return True, ref_path, ref_info

    except Exception as e:
        logger.debug(f"Could not resolve reference in {file}: {e}")
        return False, "", []
