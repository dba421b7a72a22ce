"""
Roomkit

Planar room contour analysis and finish wall generation.
"""

__version__ = "0.1.0"
