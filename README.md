# depthcluster

A library for turning 3D LiDAR point clouds into range (depth) images,
outlining point clusters with boxes or extruded convex hulls, and decoding
packed point-cloud messages into points.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Projection parameters

`depthcluster.projection_params.ProjectionParams` describes how a sensor's
beams map to image rows and columns. All angles are in radians. Presets exist
for common Velodyne sensors:

```python
import math
from depthcluster.projection_params import ProjectionParams

params = ProjectionParams.hdl_64()
print(params.rows, params.cols)              # 64 870
row = params.row_from_angle(math.radians(-5))  # nearest beam to that angle
angle = params.angle_from_col(0)
```

Other presets are `vlp_16()`, `hdl_32()`, `hdl_64_equal()` and
`full_sphere(discretization)` (default step 5 degrees).
`angle_from_col` wraps one full turn past either end; `angle_from_row` and
out-of-range columns raise `IndexError`. The sines and cosines of all row and
column angles are available as `row_angle_sines`, `row_angle_cosines`,
`col_angle_sines` and `col_angle_cosines`.

Custom layouts are built with `SpanParams(start_angle, end_angle, num_beams)`
or `SpanParams.from_step(start_angle, end_angle, step)`, passed to
`set_span(spans, direction)` with `Direction.HORIZONTAL` or
`Direction.VERTICAL`. Several vertical spans may be given as a list. `validate()`
returns `True` or raises `ProjectionError`.

Parameters can also be read from a text file with
`ProjectionParams.from_config_file(path)`. Lines starting with `#` are
skipped; every other line holds
`cols;rows;h_start;h_end;v_angle_1;...;v_angle_n` with angles in degrees.
A line with too few fields, or whose number of vertical angles differs from
`rows`, raises `ProjectionError`.

## Projecting a cloud

```python
from depthcluster.cloud_projection import Point, SphericalProjection

projection = SphericalProjection(params)
projection.init_from_points([Point(10.0, 0.0, 0.0), Point(0.0, 5.0, 1.0)])
depth = projection.depth_image        # numpy float32 array, rows x cols
indices = projection.at(row, col)     # indices of the points in that cell
```

Each pixel keeps the largest distance of the points that fell into it;
points closer than 0.01 to the sensor are ignored. `RingProjection` uses each
point's `ring` number as its row and the 2D distance as depth.
`unproject_point(image, row, col)` turns a depth pixel back into a 3D `Point`
(`RingProjection` also sets its `ring`). Per-beam depth corrections set with
`set_corrections` are subtracted from measured pixels by
`fix_depth_systematic_error_if_needed`, which `SphericalProjection` calls
after projecting. `clone()` returns an independent copy, and
`check_image_and_storage` / `check_cloud_and_storage` raise `ProjectionError`
for unsuitable input.

## Cluster outlines

```python
from depthcluster.outlines import OutlineType, outlines_for_clusters

outlines = outlines_for_clusters({1: cluster_points}, OutlineType.POLYGON3D)
for outline in outlines:
    for start, end in outline.segments():
        ...
```

`cube_from_points` builds an axis-aligned `Cube` centred on the mean of the
points; a cube lower than 0.3 is not `visible` and gives no segments, and an
oversized one has a grey `display_color`. `polygon_from_points` builds a
`Polygon3d` from the convex hull of the points extruded over their height, or
returns `None` when the cluster is flatter than 0.3. `convex_hull_2d` returns
the hull vertex indices of 2D points, counter-clockwise.

## Point-cloud messages

`depthcluster.pointcloud_msg.PointCloudMessage` and `PointField` describe a
packed cloud. `decode_cloud(message)` reads x, y, z (float32) from the first
three fields and the ring (uint16) from the fifth, honouring `is_bigendian`,
and returns a list of `Point`. `format_message_stats(message)` returns a
readable summary of the message layout.

## What this package does not do

It has no viewer or graphical interface, no command-line program, does not
subscribe to any message bus, and does not read cloud files from disk; it
works on points and messages that the caller supplies. Segmentation and
ground removal are not included.