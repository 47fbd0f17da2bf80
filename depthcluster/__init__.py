"""Range-image projections of LiDAR point clouds, cluster outlines and point-cloud message decoding."""

__version__ = "0.1.0"