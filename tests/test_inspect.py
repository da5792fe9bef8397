import numpy as np
import pytest

from mth5browser.model.inspect import (
    describe_attribute, describe_dataset, describe_group, describe_item,
    is_object_reference, preview_value, read_for_plot, resolve_reference,
)
from mth5browser.model.io import IOManager
from mth5browser.model.nodes import TreeItemData
from tests.conftest import RUN_PATH

STATION_PATH = "/Experiment/Surveys/CONUS/Stations/MT001"


@pytest.fixture
def run_ref(mth5_file):
    tree = IOManager.load_tree(mth5_file)
    station = tree.find(STATION_PATH)
    return next(a.value for a in station.attrs if a.name == "run_ref")


class TestDescribe:
    def test_root_group(self, mth5_file):
        assert describe_group(mth5_file, "/") == [
            "TYPE: group",
            "PATH: /",
            "GROUPS  : 1",
            "DATASETS: 0",
            "ATTRS   : 2",
        ]

    def test_group_skips_dangling_links(self, mth5_file):
        lines = describe_group(mth5_file, "/Experiment")
        assert "GROUPS  : 2" in lines
        assert "DATASETS: 2" in lines

    def test_dataset(self, mth5_file):
        assert describe_dataset(mth5_file, f"{RUN_PATH}/block") == [
            "TYPE: dataset",
            f"PATH : {RUN_PATH}/block",
            "SIZE : [120x80]",
            "DTYPE: H5T_INTEGER",
            "ATTRS: 0",
        ]

    def test_scalar_dataset_has_empty_size(self, mth5_file):
        assert "SIZE : []" in describe_dataset(mth5_file, "/Experiment/notes")

    def test_plain_attribute(self, mth5_file):
        lines = describe_attribute(mth5_file, f"{RUN_PATH}/ex", "units", "mV/km")
        assert lines == [
            "TYPE: attribute",
            f"OWNER: {RUN_PATH}/ex",
            "NAME : units",
            "VALUE: mV/km",
        ]

    def test_reference_attribute(self, mth5_file, run_ref):
        lines = describe_attribute(mth5_file, STATION_PATH, "run_ref", run_ref)
        assert f"REF -> {RUN_PATH}" in lines
        assert "REF TYPE: Group" in lines
        assert "REF NAME: a" in lines

    def test_reference_to_dataset_reports_size(self, mth5_file):
        import h5py

        with h5py.File(mth5_file, "r") as f:
            ref = f[f"{RUN_PATH}/ex"].ref
        ok, path, info = resolve_reference(mth5_file, ref)
        assert ok
        assert path == f"{RUN_PATH}/ex"
        assert "REF SIZE: [4096]" in info


class TestDescribeItem:
    def test_no_item(self, mth5_file):
        assert describe_item(mth5_file, None) == ["No NodeData."]

    def test_no_file(self):
        lines = describe_item(None, TreeItemData(kind="group", path="/"))
        assert lines[0] == "File path missing."

    def test_unknown_kind(self, mth5_file):
        assert describe_item(mth5_file, TreeItemData(kind="link")) == ["Unknown node type: link"]

    def test_dispatch_dataset(self, mth5_file):
        lines = describe_item(mth5_file, TreeItemData(kind="dataset", path=f"{RUN_PATH}/ex"))
        assert lines[0] == "TYPE: dataset"

    def test_dispatch_attribute(self, mth5_file):
        item = TreeItemData(kind="attribute", name="id", owner_path="/Experiment/Surveys/CONUS", value="CONUS")
        assert describe_item(mth5_file, item)[-1] == "VALUE: CONUS"


class TestPreviewValue:
    @pytest.mark.parametrize("value, expected", [
        ("mV/km", "mV/km"),
        (b"MTH5", "MTH5"),
        (256, "256"),
        (np.int32(256), "256"),
        (3.14159265, "3.1416"),
        (True, "True"),
        (np.array([]), ""),
        (np.array([7.5]), "7.5"),
        (np.zeros((2, 3), dtype=np.int32), "int32 [2x3] ..."),
        ([], "list[]"),
        (["ex"], "list[1]: ex"),
        (["ex", "ey", "hx"], "list[3]"),
        (np.array(["ex", "ey"]), "list[2]"),
        ({"a": 1, "b": 2}, "struct fields: a, b"),
        (object(), "<object>"),
    ])
    def test_preview(self, value, expected):
        assert preview_value(value) == expected

    def test_compound_record(self):
        record = np.zeros(1, dtype=[("station", "S8"), ("latitude", "f8")])[0]
        assert preview_value(record) == "struct fields: station, latitude"

    def test_truncation(self):
        out = preview_value("x" * 300, max_chars=200)
        assert out == "x" * 200 + "..."


class TestReadForPlot:
    def test_small_1d_is_read_fully(self, mth5_file):
        y = read_for_plot(mth5_file, f"{RUN_PATH}/ex")
        assert y.shape == (4096,)

    def test_large_1d_is_strided(self, mth5_file):
        y = read_for_plot(mth5_file, f"{RUN_PATH}/ex", max_points=1000)
        # stride = 4096 // 1000 = 4
        assert y.shape == (1024,)
        assert y[0] == 0
        assert y[1] == 4

    def test_nd_reads_leading_block(self, mth5_file):
        y = read_for_plot(mth5_file, f"{RUN_PATH}/block")
        assert y.shape == (50 * 50,)
        assert y[49] == 49
        assert y[50] == 80

    def test_scalar_is_empty(self, mth5_file):
        assert read_for_plot(mth5_file, "/Experiment/notes").size == 0

    def test_null_dataspace_is_empty(self, null_file):
        assert read_for_plot(null_file, "/null").size == 0
        assert "SIZE : []" in describe_dataset(null_file, "/null")


class TestReferences:
    def test_detection(self, run_ref):
        assert is_object_reference(run_ref)
        assert not is_object_reference("a")
        assert not is_object_reference(np.arange(3))

    def test_non_reference_does_not_resolve(self, mth5_file):
        assert resolve_reference(mth5_file, "not a ref") == (False, "", [])

    def test_missing_file_does_not_raise(self, tmp_path, run_ref):
        ok, path, info = resolve_reference(str(tmp_path / "gone.h5"), run_ref)
        assert not ok
        assert path == ""
        assert info == []

    def test_unresolved_reference_line(self, tmp_path, run_ref):
        lines = describe_attribute(str(tmp_path / "gone.h5"), STATION_PATH, "run_ref", run_ref)
        assert lines[-1] == "REF -> (could not resolve in this HDF5 build)"
        assert not any(line.startswith("REF TYPE") for line in lines)
