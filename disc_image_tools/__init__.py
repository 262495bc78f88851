"""
disc_image_tools

Batch conversion of optical disc images (ISO, BIN/CUE, GDI) to and from the
compressed CHD archive format. The actual conversion is done by the external
``chdman`` tool; this package launches it, streams its progress output,
classifies each run as success or failure, and sequences multi-file jobs
under skip/stop policies.
"""

__version__ = "1.0.0"
__author__ = "disc_image_tools contributors"
