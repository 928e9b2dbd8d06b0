"""Unit tests for canvas registration."""

from __future__ import annotations

import pytest

from chromatile.exceptions import InvalidGeometryError
from chromatile.geometry import BoundingBox, Offset, Scale, Size
from chromatile.registration import (
    CanvasRegistrar,
    ChannelGeometry,
    ChannelPlacement,
    scales_match,
)


def _geometry(
    name: str, bbox: tuple[int, int, int, int], raw: tuple[int, int]
) -> ChannelGeometry:
    return ChannelGeometry(
        name=name,
        bbox=BoundingBox.from_tuple(bbox),
        raw_size=Size.from_tuple(raw),
    )


@pytest.fixture
def registrar() -> CanvasRegistrar:
    return CanvasRegistrar()


class TestRegister:
    def test_identity_channel_keeps_raw_size(self, registrar: CanvasRegistrar) -> None:
        geometry = _geometry("red", (0, 0, 100, 100), (100, 100))
        placement = registrar.register(geometry, Scale(x=1, y=1))
        assert placement == ChannelPlacement(
            target_size=Size(width=100, height=100),
            target_offset=Offset(x=0, y=0),
            resample=False,
        )

    def test_channel_at_minimum_scale_uses_own_offset(
        self, registrar: CanvasRegistrar
    ) -> None:
        geometry = _geometry("red", (200, 100, 1200, 1100), (100, 100))
        placement = registrar.register(geometry, Scale(x=10, y=10))
        assert not placement.resample
        assert placement.target_size == geometry.raw_size
        assert placement.target_offset == Offset(x=20, y=10)

    def test_coarser_channel_is_resampled(self, registrar: CanvasRegistrar) -> None:
        geometry = _geometry("blue", (0, 0, 1000, 1000), (50, 50))
        placement = registrar.register(geometry, Scale(x=10, y=10))
        assert placement.resample
        assert placement.target_size == Size(width=100, height=100)
        assert placement.target_offset == Offset(x=0, y=0)

    def test_resampled_offset_in_minimum_scale_units(
        self, registrar: CanvasRegistrar
    ) -> None:
        geometry = _geometry("green", (500, 200, 900, 600), (20, 20))
        placement = registrar.register(geometry, Scale(x=10, y=10))
        assert placement.target_size == Size(width=40, height=40)
        assert placement.target_offset == Offset(x=50, y=20)

    def test_zero_target_size_is_rejected(self, registrar: CanvasRegistrar) -> None:
        geometry = _geometry("red", (0, 0, 1, 1), (1, 1))
        with pytest.raises(InvalidGeometryError, match="Channel 'red'"):
            registrar.register(geometry, Scale(x=4, y=4))


class TestCanvasSize:
    def test_canvas_is_truncated(self, registrar: CanvasRegistrar) -> None:
        size = registrar.canvas_size(
            Size(width=1001, height=999), Scale(x=10, y=10)
        )
        assert size == Size(width=100, height=99)

    def test_canvas_at_unit_scale_is_reference(
        self, registrar: CanvasRegistrar
    ) -> None:
        reference = Size(width=640, height=480)
        assert registrar.canvas_size(reference, Scale(x=1, y=1)) == reference

    def test_zero_area_canvas_is_rejected(self, registrar: CanvasRegistrar) -> None:
        with pytest.raises(InvalidGeometryError, match="zero area"):
            registrar.canvas_size(Size(width=1, height=1), Scale(x=2, y=2))


class TestPlan:
    def test_mixed_scale_plan(self, registrar: CanvasRegistrar) -> None:
        plan = registrar.plan(
            [
                _geometry("red", (0, 0, 1000, 1000), (100, 100)),
                _geometry("green", (500, 200, 900, 600), (20, 20)),
                _geometry("blue", (0, 0, 1000, 1000), (50, 50)),
            ],
            Size(width=1000, height=1000),
        )
        assert plan.minimum_scale == Scale(x=10, y=10)
        assert plan.canvas_size == Size(width=100, height=100)
        assert not plan.placements["red"].resample
        assert plan.placements["green"].target_offset == Offset(x=50, y=20)
        assert plan.placements["blue"].target_size == Size(width=100, height=100)

    def test_axes_minimised_independently(self, registrar: CanvasRegistrar) -> None:
        plan = registrar.plan(
            [
                _geometry("red", (0, 0, 200, 800), (100, 100)),  # scale (2, 8)
                _geometry("green", (0, 0, 400, 100), (100, 100)),  # scale (4, 1)
            ],
            Size(width=400, height=800),
        )
        assert plan.minimum_scale == Scale(x=2, y=1)
        assert plan.canvas_size == Size(width=200, height=800)
        # Neither channel matches (2, 1) exactly, so both are resampled
        assert plan.placements["red"].target_size == Size(width=100, height=800)
        assert plan.placements["green"].target_size == Size(width=200, height=100)

    def test_duplicate_names_rejected(self, registrar: CanvasRegistrar) -> None:
        geometry = _geometry("red", (0, 0, 10, 10), (10, 10))
        with pytest.raises(InvalidGeometryError, match="Duplicate channel names"):
            registrar.plan([geometry, geometry], Size(width=10, height=10))

    def test_empty_channel_set_rejected(self, registrar: CanvasRegistrar) -> None:
        with pytest.raises(InvalidGeometryError):
            registrar.plan([], Size(width=10, height=10))

    def test_summary_is_plain_data(self, registrar: CanvasRegistrar) -> None:
        plan = registrar.plan(
            [_geometry("red", (0, 0, 100, 100), (100, 100))],
            Size(width=100, height=100),
        )
        assert plan.summary() == {
            "minimum_scale": (1.0, 1.0),
            "canvas_size": (100, 100),
            "placements": {
                "red": {
                    "target_size": (100, 100),
                    "target_offset": (0, 0),
                    "resample": False,
                }
            },
        }


class TestScalesMatch:
    def test_float_noise_still_matches(self) -> None:
        assert scales_match(Scale(x=0.1 + 0.2, y=1.0), Scale(x=0.3, y=1.0))

    def test_different_axis_does_not_match(self) -> None:
        assert not scales_match(Scale(x=1.0, y=1.0), Scale(x=1.0, y=1.01))
