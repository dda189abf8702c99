"""Interactive Virtual Server creation wizard"""

__version__ = "1.0.0"
