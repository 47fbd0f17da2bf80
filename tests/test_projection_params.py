import math

import pytest

from depthcluster.projection_params import (
    Direction,
    ProjectionError,
    ProjectionParams,
    SpanParams,
)


def test_vlp16_dimensions():
    params = ProjectionParams.vlp_16()
    assert params.rows == 16
    assert params.cols == 870
    assert params.size == params.rows * params.cols


@pytest.mark.parametrize(
    "factory, rows",
    [
        (ProjectionParams.vlp_16, 16),
        (ProjectionParams.hdl_32, 32),
        (ProjectionParams.hdl_64, 64),
        (ProjectionParams.hdl_64_equal, 64),
    ],
)
def test_presets_are_valid(factory, rows):
    params = factory()
    assert params.validate() is True
    assert params.rows == rows
    assert params.cols == 870


def test_vlp16_angles():
    params = ProjectionParams.vlp_16()
    assert params.v_start_angle == pytest.approx(math.radians(15))
    assert params.v_end_angle == pytest.approx(math.radians(-15))
    assert params.v_span == pytest.approx(math.radians(30))
    assert params.h_start_angle == pytest.approx(-math.pi)
    assert params.h_span == pytest.approx(2 * math.pi)
    assert params.angle_from_row(0) == pytest.approx(math.radians(15))
    assert params.angle_from_col(0) == pytest.approx(-math.pi)


def test_hdl64_second_block_starts_where_declared():
    params = ProjectionParams.hdl_64()
    assert params.angle_from_row(32) == pytest.approx(math.radians(-8.87))
    assert params.v_end_angle == pytest.approx(math.radians(-24.87))


def test_row_round_trip():
    params = ProjectionParams.hdl_64()
    for row in range(params.rows):
        assert params.row_from_angle(params.angle_from_row(row)) == row


def test_col_round_trip():
    params = ProjectionParams.vlp_16()
    for col in range(0, params.cols, 7):
        assert params.col_from_angle(params.angle_from_col(col)) == col


def test_angles_beyond_range_clamp_to_edges():
    params = ProjectionParams.vlp_16()
    assert params.row_from_angle(1.0) == 0
    assert params.row_from_angle(-1.0) == params.rows - 1
    assert params.col_from_angle(-10.0) == 0
    assert params.col_from_angle(10.0) == params.cols - 1


def test_col_wraps_once():
    params = ProjectionParams.vlp_16()
    assert params.angle_from_col(-1) == params.angle_from_col(params.cols - 1)
    assert params.angle_from_col(params.cols) == params.angle_from_col(0)
    with pytest.raises(IndexError):
        params.angle_from_col(3 * params.cols)


def test_bad_row_raises():
    params = ProjectionParams.vlp_16()
    with pytest.raises(IndexError):
        params.angle_from_row(params.rows)
    with pytest.raises(IndexError):
        params.angle_from_row(-1)


def test_cos_sin_match_angles():
    params = ProjectionParams.hdl_32()
    for row in range(params.rows):
        angle = params.angle_from_row(row)
        assert params.row_angle_cosines[row] == pytest.approx(math.cos(angle))
        assert params.row_angle_sines[row] == pytest.approx(math.sin(angle))
    assert len(params.col_angle_cosines) == params.cols
    assert params.col_angle_sines[5] == pytest.approx(
        math.sin(params.angle_from_col(5))
    )


def test_empty_params_invalid():
    with pytest.raises(ProjectionError):
        ProjectionParams().validate()


def test_span_params_default_invalid():
    assert SpanParams().valid is False
    assert SpanParams(0.0, 1.0, 4).valid is True
    assert SpanParams(1.0, 1.0, 4).valid is False


def test_span_from_step_keeps_step():
    span = SpanParams.from_step(0.0, 1.0, 0.25)
    assert span.step == 0.25
    assert span.num_beams * span.step == pytest.approx(span.span)


def test_set_span_combines_spans():
    params = ProjectionParams()
    spans = [SpanParams(0.5, 0.0, 5), SpanParams(-0.1, -0.6, 5)]
    params.set_span(spans, Direction.VERTICAL)
    params.set_span(SpanParams(-1.0, 1.0, 10), Direction.HORIZONTAL)
    assert params.rows == sum(s.num_beams for s in spans)
    assert params.v_start_angle == 0.5
    assert params.v_end_angle == -0.6
    assert params.angle_from_row(5) == -0.1
    assert params.validate() is True


def test_full_sphere():
    params = ProjectionParams.full_sphere()
    assert params.validate() is True
    assert params.h_start_angle == pytest.approx(-math.pi)
    assert params.v_start_angle == pytest.approx(-math.pi / 2)
    assert params.angle_from_row(1) - params.angle_from_row(0) == pytest.approx(
        math.radians(5)
    )


def test_from_config_file(tmp_path):
    config = tmp_path / "img.cfg"
    config.write_text("# a comment\n4;3;-180;180;10;0;-10\n", encoding="utf-8")
    params = ProjectionParams.from_config_file(config)
    assert params.rows == 3
    assert params.cols == 4
    assert params.angle_from_row(0) == pytest.approx(math.radians(10))
    assert params.angle_from_row(2) == pytest.approx(math.radians(-10))
    assert params.angle_from_col(0) == pytest.approx(-math.pi)
    assert params.row_angle_cosines[1] == pytest.approx(1.0)


def test_from_config_file_wrong_row_count(tmp_path):
    config = tmp_path / "img.cfg"
    config.write_text("4;5;-180;180;10;0;-10\n", encoding="utf-8")
    with pytest.raises(ProjectionError):
        ProjectionParams.from_config_file(config)


def test_from_config_file_short_line(tmp_path):
    config = tmp_path / "img.cfg"
    config.write_text("4;3;-180\n", encoding="utf-8")
    with pytest.raises(ProjectionError):
        ProjectionParams.from_config_file(config)


def test_from_config_file_only_comments(tmp_path):
    config = tmp_path / "img.cfg"
    config.write_text("# nothing here\n", encoding="utf-8")
    with pytest.raises(ProjectionError):
        ProjectionParams.from_config_file(config)


def test_from_config_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        ProjectionParams.from_config_file(tmp_path / "absent.cfg")