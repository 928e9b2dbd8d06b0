"""Unit tests for tile pyramid layout."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from chromatile.exceptions import InvalidGeometryError
from chromatile.geometry import Size
from chromatile.tiling import PyramidLayout, TileCoord, finest_level, tile_name

sizes = st.builds(
    Size,
    width=st.integers(min_value=1, max_value=200_000),
    height=st.integers(min_value=1, max_value=200_000),
)
tile_sizes = st.integers(min_value=1, max_value=1024)


class TestFinestLevel:
    def test_single_tile_source(self) -> None:
        assert finest_level(Size(width=256, height=256), 256) == 0

    def test_one_pixel_over(self) -> None:
        assert finest_level(Size(width=257, height=10), 256) == 1

    def test_rectangular_source(self) -> None:
        assert finest_level(Size(width=2304, height=640), 256) == 4

    @pytest.mark.parametrize("tile_size", [0, -16])
    def test_non_positive_tile_size(self, tile_size: int) -> None:
        with pytest.raises(InvalidGeometryError, match="Tile size must be positive"):
            finest_level(Size(width=10, height=10), tile_size)

    @given(sizes, tile_sizes)
    def test_finest_level_is_smallest_covering(self, size: Size, tile: int) -> None:
        level = finest_level(size, tile)
        longest = max(size.width, size.height)
        assert tile * 2**level >= longest
        if level > 0:
            assert tile * 2 ** (level - 1) < longest


class TestPyramidLayout:
    @pytest.fixture
    def layout(self) -> PyramidLayout:
        return PyramidLayout(source_size=Size(width=2304, height=640), tile_size=256)

    def test_levels_run_finest_to_coarsest(self, layout: PyramidLayout) -> None:
        assert list(layout.levels) == [4, 3, 2, 1, 0]

    @pytest.mark.parametrize(
        ("level", "grid"),
        [(4, (9, 3)), (3, (5, 2)), (2, (3, 1)), (1, (2, 1)), (0, (1, 1))],
    )
    def test_grid_per_level(
        self, layout: PyramidLayout, level: int, grid: tuple[int, int]
    ) -> None:
        assert layout.grid(level) == grid

    def test_tile_count(self, layout: PyramidLayout) -> None:
        assert layout.tile_count(4) == 27
        assert sum(layout.tile_count(level) for level in layout.levels) == 43

    @pytest.mark.parametrize("level", [-1, 5])
    def test_level_out_of_range(self, layout: PyramidLayout, level: int) -> None:
        with pytest.raises(InvalidGeometryError, match=r"out of range \[0, 4\]"):
            layout.grid(level)

    def test_coords_are_row_major(self, layout: PyramidLayout) -> None:
        coords = list(layout.coords(3))
        assert coords[:3] == [
            TileCoord(column=0, row=0, level=3),
            TileCoord(column=1, row=0, level=3),
            TileCoord(column=2, row=0, level=3),
        ]
        assert coords[-1] == TileCoord(column=4, row=1, level=3)
        assert len(coords) == layout.tile_count(3)

    def test_zero_tile_size_rejected(self) -> None:
        with pytest.raises(InvalidGeometryError):
            PyramidLayout(source_size=Size(width=10, height=10), tile_size=0)

    @given(sizes, tile_sizes)
    def test_grid_properties(self, size: Size, tile: int) -> None:
        layout = PyramidLayout(source_size=size, tile_size=tile)
        top = layout.finest_level
        assert layout.grid(0) == (1, 1)
        assert layout.grid(top) == (-(-size.width // tile), -(-size.height // tile))
        for level in range(1, top + 1):
            cols, rows = layout.grid(level)
            coarse_cols, coarse_rows = layout.grid(level - 1)
            assert coarse_cols == -(-cols // 2)
            assert coarse_rows == -(-rows // 2)


class TestTileName:
    def test_with_prefix(self) -> None:
        assert tile_name(TileCoord(column=3, row=1, level=2), "dzi") == "dzi_2_1_3"

    def test_without_prefix(self) -> None:
        assert tile_name(TileCoord(column=3, row=1, level=2)) == "2_1_3"

    def test_zero_coords(self) -> None:
        assert tile_name(TileCoord(column=0, row=0, level=0), "slide") == "slide_0_0_0"
