"""TextSight: find rectangular text-like regions in raster images."""

__version__ = "0.1.0"
