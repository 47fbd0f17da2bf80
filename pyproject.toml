[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "depthcluster"
version = "0.1.0"
description = "Range-image projections of 3D LiDAR point clouds, cluster outlines and point-cloud message decoding"
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = ["lidar", "point cloud", "range image", "projection", "velodyne", "clustering"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Image Processing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["depthcluster"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"
