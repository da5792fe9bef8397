"""
Input Manager (HDF5)
Digests MTH5/HDF5 files into H5Node trees, either structure-only for browsing
or with a full read of every dataset for export.
"""
import logging
import math
import os
import pickle
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterator, Optional, Union

import h5py
import numpy as np
from h5py import h5t

from mth5browser.model.nodes import (
    AttributeEntry, DatasetMeta, H5Node, ResolvedReference, DATASET, GROUP, sort_children
)
from mth5browser.model.paths import join_h5_path, tail_name

# Get module logger
logger = logging.getLogger(__name__)

UNREADABLE = "<unreadable>"
SKIPPED = "<skipped>"

H5T_CLASS_NAMES: dict[int, str] = {
    h5t.INTEGER: "H5T_INTEGER",
    h5t.FLOAT: "H5T_FLOAT",
    h5t.TIME: "H5T_TIME",
    h5t.STRING: "H5T_STRING",
    h5t.BITFIELD: "H5T_BITFIELD",
    h5t.OPAQUE: "H5T_OPAQUE",
    h5t.COMPOUND: "H5T_COMPOUND",
    h5t.REFERENCE: "H5T_REFERENCE",
    h5t.ENUM: "H5T_ENUM",
    h5t.VLEN: "H5T_VLEN",
    h5t.ARRAY: "H5T_ARRAY",
}


@dataclass
class ExportOptions:
    read_dataset_data: bool = True       # FULL dataset read, can exceed memory
    read_attribute_values: bool = True
    fail_on_read_error: bool = False
    max_dataset_elements: float = math.inf


@dataclass
class ExportResult:
    file: str
    root_path: str
    exported_at: str
    tree: H5Node


# ---- LOW LEVEL HELPERS ----

def dtype_class_name(dset: h5py.Dataset) -> str:
    """HDF5 datatype class of a dataset, e.g. 'H5T_FLOAT'."""
    type_class = dset.id.get_type().get_class()
    return H5T_CLASS_NAMES.get(type_class, f"H5T_CLASS_{type_class}")


def dataset_meta(dset: h5py.Dataset) -> DatasetMeta:
    """Shape/class metadata; each field degrades to its default on failure."""
    meta = DatasetMeta()

    try:
        meta.size = None if dset.shape is None else tuple(int(s) for s in dset.shape)
    except Exception as e:
        logger.debug(f"No shape for {dset.name}: {e}")

    try:
        meta.dtype_class = dtype_class_name(dset)
    except Exception as e:
        logger.debug(f"No datatype class for {dset.name}: {e}")

    meta.ndims = len(meta.size) if meta.size is not None else None
    meta.is_compound = meta.dtype_class == "H5T_COMPOUND"
    return meta


def normalize_value(value: Any) -> Any:
    """Turn h5py/numpy attribute values into plain Python where that is lossless."""
    if isinstance(value, (bytes, np.bytes_)):
        return bytes(value).decode("utf-8", errors="replace")

    if isinstance(value, np.ndarray):
        if value.dtype.kind == "S":
            return np.char.decode(value, "utf-8", "replace")
        return value

    # Compound records (np.void) stay numpy so their field names survive
    if isinstance(value, np.generic) and not isinstance(value, np.void):
        return value.item()

    return value


def iter_members(group: h5py.Group) -> Iterator[tuple[str, Union[h5py.Group, h5py.Dataset]]]:
    """
    Yield (name, object) for every group/dataset member that can be opened.

    Dangling soft links, unreachable external links and committed datatypes
    are skipped.
    """
    for name in group.keys():
        try:
            obj = group[name]
        except (KeyError, OSError, ValueError) as e:
            logger.warning(f"Skipping unresolvable link '{join_h5_path(group.name, name)}': {e}")
            continue

        if isinstance(obj, (h5py.Group, h5py.Dataset)):
            yield name, obj
        else:
            logger.debug(f"Skipping non group/dataset member '{join_h5_path(group.name, name)}'")


def _read_attrs(
    obj: Union[h5py.Group, h5py.Dataset],
    obj_path: str,
    read_values: bool,
    fail_on_error: bool = False,
    unreadable: Any = UNREADABLE,
    skipped: Any = SKIPPED,
    convert: Callable[[Any], Any] = normalize_value,
) -> list[AttributeEntry]:
    """Read the attributes of one object (best-effort)."""
    try:
        names = list(obj.attrs.keys())
    except Exception as e:
        if fail_on_error:
            raise
        logger.warning(f"Could not list attributes of '{obj_path}': {e}")
        return []

    attrs = []
    for name in names:
        entry = AttributeEntry(name=name, path=f"{obj_path}@{name}")

        if not read_values:
            entry.value = skipped
        else:
            try:
                entry.value = convert(obj.attrs[name])
                entry.read_ok = True
            except Exception as e:
                if fail_on_error:
                    raise
                logger.debug(f"Attribute '{entry.path}' unreadable: {e}")
                entry.value = unreadable
                entry.read_error = str(e)

        attrs.append(entry)

    return attrs


def _resolve_path(h5_file: h5py.File, ref: h5py.Reference) -> Optional[str]:
    if not ref:
        return None
    try:
        return h5_file[ref].name
    except Exception as e:
        logger.debug(f"Could not dereference object reference: {e}")
        return None


def make_portable(value: Any, h5_file: h5py.File) -> Any:
    """
    Replace values that only make sense while the file is open.

    Object references become ResolvedReference, null dataspaces become None.
    """
    if isinstance(value, h5py.Empty):
        return None

    if isinstance(value, h5py.Reference):
        return ResolvedReference(_resolve_path(h5_file, value))

    if isinstance(value, np.ndarray) and value.dtype == object:
        if h5py.check_dtype(ref=value.dtype) is not None or any(
            isinstance(v, h5py.Reference) for v in value.flat
        ):
            out = np.empty(value.shape, dtype=object)
            for idx, v in np.ndenumerate(value):
                out[idx] = make_portable(v, h5_file)
            return out

    return value


class IOManager:

    # ---- STRUCTURE-ONLY DIGEST ----

    @staticmethod
    def load_tree(filepath: str, read_attributes: bool = True) -> H5Node:
        """
        Digest the structure of an HDF5 file for browsing.

        Dataset values are NOT read; only groups, dataset metadata and
        (optionally) attribute values.
        """
        filepath = os.fspath(filepath)
        logger.info(f"Loading structure of: {filepath}")

        if not os.path.isfile(filepath):
            msg = f"File not found: {filepath}"
            logger.error(msg)
            raise FileNotFoundError(msg)

        if not h5py.is_hdf5(filepath):
            msg = f"File '{filepath}' is not a valid HDF5 file."
            logger.error(msg)
            raise ValueError(msg)

        with h5py.File(filepath, "r") as f:
            tree = IOManager._digest_group(f["/"], "/", "/", read_attributes, ancestors=set())

        # Keep the file path available for selection callbacks
        tree.file = os.path.abspath(filepath)

        n_groups = sum(1 for n in tree.walk() if n.is_group)
        n_dsets = sum(1 for n in tree.walk() if n.is_dataset)
        logger.info(f"Loaded {n_groups} groups and {n_dsets} datasets from {filepath}")
        return tree

    @staticmethod
    def _digest_group(
        group: h5py.Group,
        group_path: str,
        group_name: str,
        read_attributes: bool,
        ancestors: set,
    ) -> H5Node:
        node = H5Node(type=GROUP, name=group_name, path=group_path)
        node.attrs = _read_attrs(group, group_path, read_attributes)

        ancestors = ancestors | {group.id}

        # --- 1. Child groups, then datasets ---
        groups: list[H5Node] = []
        datasets: list[H5Node] = []
        for name, obj in iter_members(group):
            child_path = join_h5_path(group_path, name)

            if isinstance(obj, h5py.Group):
                if obj.id in ancestors:
                    logger.warning(f"Skipping '{child_path}': hard link back to an ancestor group.")
                    continue
                groups.append(IOManager._digest_group(obj, child_path, name, read_attributes, ancestors))
            else:
                datasets.append(IOManager._digest_dataset(obj, child_path, name, read_attributes))

        # --- 2. Sort: groups first, then datasets (alphabetical) ---
        node.children = sort_children(groups + datasets)
        return node

    @staticmethod
    def _digest_dataset(dset: h5py.Dataset, dset_path: str, dset_name: str, read_attributes: bool) -> H5Node:
        node = H5Node(type=DATASET, name=dset_name, path=dset_path)
        node.attrs = _read_attrs(dset, dset_path, read_attributes)
        node.meta = dataset_meta(dset)
        return node

    # ---- FULL-READ EXPORT ----

    @staticmethod
    def export_file(
        filepath: str,
        root_path: str = "/",
        options: Optional[ExportOptions] = None,
    ) -> ExportResult:
        """
        Export an HDF5 file (or the subtree at `root_path`) including all
        dataset values.

        FULL READ of datasets can exceed memory for large MTH5 files; use
        `ExportOptions.max_dataset_elements` to skip big datasets.
        """
        filepath = os.fspath(filepath)
        options = options or ExportOptions()
        root_path = root_path or "/"

        logger.info(f"Exporting '{root_path}' from: {filepath}")

        if not os.path.isfile(filepath):
            msg = f"File not found: {filepath}"
            logger.error(msg)
            raise FileNotFoundError(msg)

        with h5py.File(filepath, "r") as f:
            if root_path not in f:
                msg = f"Path '{root_path}' does not exist in {filepath}"
                logger.error(msg)
                raise KeyError(msg)

            root_obj = f[root_path]
            root_name = tail_name(root_path)

            if isinstance(root_obj, h5py.Dataset):
                tree = IOManager._export_dataset(f, root_obj, root_path, root_name, options)
            else:
                tree = IOManager._export_group(f, root_obj, root_path, root_name, options, ancestors=set())

        result = ExportResult(
            file=filepath,
            root_path=root_path,
            exported_at=datetime.now().strftime("%d-%b-%Y %H:%M:%S"),
            tree=tree,
        )

        stats = summarize(tree)
        logger.info(
            f"Export complete: {stats['datasets']} datasets, {stats['read']} read, "
            f"{stats['unread']} not read, {stats['nbytes']} bytes in memory."
        )
        return result

    @staticmethod
    def _export_attrs(h5_file: h5py.File, obj, obj_path: str, options: ExportOptions) -> list[AttributeEntry]:
        return _read_attrs(
            obj, obj_path,
            read_values=options.read_attribute_values,
            fail_on_error=options.fail_on_read_error,
            unreadable=None,
            skipped=None,
            convert=lambda v: make_portable(normalize_value(v), h5_file),
        )

    @staticmethod
    def _export_group(
        h5_file: h5py.File,
        group: h5py.Group,
        group_path: str,
        group_name: str,
        options: ExportOptions,
        ancestors: set,
    ) -> H5Node:
        node = H5Node(type=GROUP, name=group_name, path=group_path)
        node.attrs = IOManager._export_attrs(h5_file, group, group_path, options)

        ancestors = ancestors | {group.id}

        # Groups first, then datasets, in library order
        members = list(iter_members(group))
        for name, obj in members:
            if isinstance(obj, h5py.Group):
                child_path = join_h5_path(group_path, name)
                if obj.id in ancestors:
                    logger.warning(f"Skipping '{child_path}': hard link back to an ancestor group.")
                    continue
                node.children.append(
                    IOManager._export_group(h5_file, obj, child_path, name, options, ancestors)
                )

        for name, obj in members:
            if isinstance(obj, h5py.Dataset):
                child_path = join_h5_path(group_path, name)
                node.children.append(IOManager._export_dataset(h5_file, obj, child_path, name, options))

        return node

    @staticmethod
    def _export_dataset(
        h5_file: h5py.File,
        dset: h5py.Dataset,
        dset_path: str,
        dset_name: str,
        options: ExportOptions,
    ) -> H5Node:
        node = H5Node(type=DATASET, name=dset_name, path=dset_path)

        # --- 1. Dataset metadata ---
        node.meta = dataset_meta(dset)

        # --- 2. Dataset attributes ---
        node.attrs = IOManager._export_attrs(h5_file, dset, dset_path, options)

        # --- 3. Dataset values (optional full read) ---
        node.read_ok = False
        node.read_error = ""
        node.data = None

        if not options.read_dataset_data:
            return node

        if node.meta.size is not None:
            n_elements = math.prod(node.meta.size)
            if math.isfinite(options.max_dataset_elements) and n_elements > options.max_dataset_elements:
                node.read_error = f"Skipped: too large ({n_elements:g} elements > limit)."
                logger.info(f"{dset_path}: {node.read_error}")
                return node

        try:
            node.data = make_portable(dset[()], h5_file)
            node.read_ok = True
        except Exception as e:
            node.read_error = str(e)
            logger.warning(f"Failed to read dataset '{dset_path}': {e}")
            if options.fail_on_read_error:
                raise

        return node

    # ---- EXPORT PERSISTENCE ----

    @staticmethod
    def save_export(result: ExportResult, filepath: str) -> None:
        logger.info(f"Saving export to: {filepath}")
        try:
            with open(filepath, "wb") as fh:
                pickle.dump(result, fh, protocol=pickle.HIGHEST_PROTOCOL)
        except Exception as e:
            logger.exception(f"Failed to save export: {e}")
            raise e
        logger.info(f"Export saved to: {filepath}")

    @staticmethod
    def load_export(filepath: str) -> ExportResult:
        with open(filepath, "rb") as fh:
            result = pickle.load(fh)
        if not isinstance(result, ExportResult):
            raise ValueError(f"File '{filepath}' does not contain an MTH5 export.")
        return result


def summarize(tree: H5Node) -> dict[str, int]:
    """Counts used for logging and the status bar."""
    stats = {"groups": 0, "datasets": 0, "read": 0, "unread": 0, "nbytes": 0}
    for node in tree.walk():
        if node.is_group:
            stats["groups"] += 1
            continue

        stats["datasets"] += 1
        if node.read_ok:
            stats["read"] += 1
            stats["nbytes"] += int(getattr(node.data, "nbytes", 0) or 0)
        else:
            stats["unread"] += 1
    return stats
