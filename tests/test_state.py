import pytest

from mth5browser.model.io import IOManager
from mth5browser.model.state import BrowserState


@pytest.fixture
def state(mth5_file):
    state = BrowserState()
    state.set_tree(IOManager.load_tree(mth5_file))
    return state


def test_open_state(state, mth5_file):
    assert state.is_open
    assert state.filepath == state.tree.file
    assert state.last_export is None


def test_export_of_open_file_is_kept(state):
    result = IOManager.export_file(state.filepath)
    assert state.accept_export(result)
    assert state.last_export is result


def test_export_of_previous_file_is_discarded(state, mth5_file, null_file):
    stale = IOManager.export_file(mth5_file)
    state.set_tree(IOManager.load_tree(null_file))

    assert not state.accept_export(stale)
    assert state.last_export is None


def test_export_after_close_is_discarded(state):
    result = IOManager.export_file(state.filepath)
    state.reset()

    assert not state.accept_export(result)
    assert not state.is_open
    assert state.last_export is None
