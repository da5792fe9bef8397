import os

import h5py
import pytest

from mth5browser.model.io import SKIPPED, UNREADABLE, IOManager
from tests.conftest import RUN_PATH, failing_attr_read


@pytest.fixture
def tree(mth5_file):
    return IOManager.load_tree(mth5_file)


def test_root_node(tree, mth5_file):
    assert tree.type == "group"
    assert tree.name == "/"
    assert tree.path == "/"
    assert tree.file == os.path.abspath(mth5_file)


def test_root_attributes_are_decoded(tree):
    attrs = {a.name: a for a in tree.attrs}
    assert attrs["file.type"].value == "MTH5"
    assert attrs["file.version"].value == "0.2.0"
    assert attrs["file.type"].path == "/@file.type"
    assert attrs["file.type"].read_ok


def test_groups_first_then_datasets(tree):
    experiment = tree.find("/Experiment")
    # the dangling soft link is skipped
    assert [c.name for c in experiment.children] == ["Reports", "Surveys", "long", "notes"]


def test_datasets_sorted_case_insensitive(tree):
    run = tree.find(RUN_PATH)
    assert [c.name for c in run.children] == ["block", "ex", "Hy"]


def test_dataset_metadata(tree):
    ex = tree.find(f"{RUN_PATH}/ex")
    assert ex.is_dataset
    assert ex.meta.size == (4096,)
    assert ex.meta.dtype_class == "H5T_FLOAT"
    assert ex.meta.ndims == 1
    assert not ex.meta.is_compound
    assert ex.data is None


def test_compound_dataset(tree):
    summary = tree.find("/Experiment/Surveys/CONUS/channel_summary")
    assert summary.meta.dtype_class == "H5T_COMPOUND"
    assert summary.meta.is_compound


def test_scalar_string_dataset(tree):
    notes = tree.find("/Experiment/notes")
    assert notes.meta.size == ()
    assert notes.meta.dtype_class == "H5T_STRING"


def test_dataset_attributes(tree):
    ex = tree.find(f"{RUN_PATH}/ex")
    attrs = {a.name: a.value for a in ex.attrs}
    assert attrs == {"units": "mV/km", "Sample_Rate": 256}


def test_reference_attribute_is_kept(tree):
    station = tree.find("/Experiment/Surveys/CONUS/Stations/MT001")
    ref = next(a.value for a in station.attrs if a.name == "run_ref")
    assert isinstance(ref, h5py.Reference)


def test_string_array_attribute(tree):
    station = tree.find("/Experiment/Surveys/CONUS/Stations/MT001")
    channels = next(a.value for a in station.attrs if a.name == "channels")
    assert list(channels) == ["ex", "ey", "hx"]


def test_skip_attribute_values(mth5_file):
    tree = IOManager.load_tree(mth5_file, read_attributes=False)
    assert tree.attrs
    assert all(a.value == SKIPPED for a in tree.attrs)
    assert not any(a.read_ok for a in tree.attrs)


def test_unreadable_attribute_is_recorded(mth5_file, monkeypatch):
    monkeypatch.setattr(h5py.AttributeManager, "__getitem__", failing_attr_read("units"))
    tree = IOManager.load_tree(mth5_file)

    attrs = {a.name: a for a in tree.find(f"{RUN_PATH}/ex").attrs}
    assert attrs["units"].value == UNREADABLE
    assert attrs["units"].read_ok is False
    assert attrs["units"].read_error == "attribute read failed"
    # other attributes are unaffected
    assert attrs["Sample_Rate"].value == 256
    assert attrs["Sample_Rate"].read_ok


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        IOManager.load_tree(str(tmp_path / "missing.h5"))


def test_not_hdf5(not_hdf5_file):
    with pytest.raises(ValueError):
        IOManager.load_tree(not_hdf5_file)


def test_hard_link_cycle_is_not_followed(tmp_path):
    path = tmp_path / "cycle.h5"
    with h5py.File(path, "w") as f:
        grp = f.create_group("loop")
        grp["back"] = f["/loop"]

    tree = IOManager.load_tree(str(path))
    loop = tree.find("/loop")
    assert loop.children == []
