"""Desktop browser for the internal hierarchy of MTH5/HDF5 files."""
