"""
The MODEL layer contains pure data structures and HDF5 access.
It has NO knowledge of the GUI (Qt) or the plotting (pyqtgraph).
"""
