# tests/conftest.py
"""
Global pytest fixtures for mth5browser tests.
"""
import h5py
import numpy as np
import pytest

RUN_PATH = "/Experiment/Surveys/CONUS/Stations/MT001/a"


def failing_attr_read(bad_name):
    """Replacement for AttributeManager.__getitem__ that fails on one name."""
    original = h5py.AttributeManager.__getitem__

    def _getitem(self, name):
        if name == bad_name:
            raise OSError("attribute read failed")
        return original(self, name)

    return _getitem


@pytest.fixture
def mth5_file(tmp_path):
    """Write a small MTH5-like file and return its path as a string."""
    path = tmp_path / "sample.h5"

    with h5py.File(path, "w") as f:
        f.attrs["file.type"] = "MTH5"
        f.attrs["file.version"] = np.bytes_(b"0.2.0")

        experiment = f.create_group("Experiment")
        experiment.create_group("Reports")
        experiment.create_dataset("notes", data="recorded with LEMI-424")
        experiment.create_dataset("long", data=np.arange(1000, dtype=np.int64))
        experiment["dangling"] = h5py.SoftLink("/does/not/exist")

        survey = f.create_group("Experiment/Surveys/CONUS")
        survey.attrs["id"] = "CONUS"

        summary = np.zeros(3, dtype=[("station", "S8"), ("latitude", "f8")])
        summary["station"] = [b"MT001", b"MT002", b"MT003"]
        summary["latitude"] = [40.1, 40.2, 40.3]
        survey.create_dataset("channel_summary", data=summary)

        station = f.create_group("Experiment/Surveys/CONUS/Stations/MT001")
        station.attrs["Latitude"] = 40.5
        station.attrs["channels"] = np.array([b"ex", b"ey", b"hx"])

        run = station.create_group("a")
        station.attrs["run_ref"] = run.ref

        ex = run.create_dataset("ex", data=np.arange(4096, dtype=np.float64))
        ex.attrs["units"] = "mV/km"
        ex.attrs["Sample_Rate"] = np.int32(256)
        run.create_dataset("Hy", data=np.ones(3))
        run.create_dataset("block", data=np.arange(120 * 80, dtype=np.int32).reshape(120, 80))

    return str(path)


@pytest.fixture
def null_file(tmp_path):
    """File holding a null-dataspace dataset and attribute."""
    path = tmp_path / "null.h5"

    with h5py.File(path, "w") as f:
        f.attrs["empty"] = h5py.Empty("f8")
        f.create_dataset("null", data=h5py.Empty("f8"))

    return str(path)


@pytest.fixture
def not_hdf5_file(tmp_path):
    path = tmp_path / "notes.h5"
    path.write_text("this is not an HDF5 file")
    return str(path)
