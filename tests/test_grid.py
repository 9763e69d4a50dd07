import unittest
import numpy as np

from l2w_puzzle.constants import PIECE_COLORS
from l2w_puzzle.game.grid import (
    Edge,
    apply_gravity,
    can_place,
    create_empty_grid,
    is_edge_full,
    place,
    remove_cells,
)
from l2w_puzzle.game.pieces import BASE_SHAPES, FallingPiece, ShapeType


def make_piece(kind: ShapeType, x: int = 0, y: int = 0, color: str = PIECE_COLORS[0]) -> FallingPiece:
    return FallingPiece(kind=kind, color=color, mask=BASE_SHAPES[kind].copy(), x=x, y=y)


class TestGrid(unittest.TestCase):

    def setUp(self):
        self.grid = create_empty_grid()

    def test_empty_grid(self):
        self.assertEqual(self.grid.shape, (14, 14))
        self.assertTrue(np.all(self.grid == 0))

    def test_can_place_bounds(self):
        piece = make_piece(ShapeType.O)
        self.assertTrue(can_place(self.grid, piece))
        self.assertTrue(can_place(self.grid, piece.at(12, 12)))
        self.assertFalse(can_place(self.grid, piece.at(13, 0)))  # right edge
        self.assertFalse(can_place(self.grid, piece.at(-1, 0)))
        self.assertFalse(can_place(self.grid, piece.at(0, 13)))  # bottom edge
        self.assertFalse(can_place(self.grid, piece, dx=0, dy=13))

    def test_can_place_overhang(self):
        piece = make_piece(ShapeType.O, x=3, y=-1)
        self.assertFalse(can_place(self.grid, piece))
        self.assertTrue(can_place(self.grid, piece, allow_overhang=True))

    def test_can_place_collision(self):
        self.grid[5, 5] = 2
        piece = make_piece(ShapeType.O, x=4, y=4)
        self.assertFalse(can_place(self.grid, piece))
        self.assertTrue(can_place(self.grid, piece, dx=-2))

    def test_place_writes_color_index(self):
        piece = make_piece(ShapeType.T, x=2, y=3, color=PIECE_COLORS[2])
        placed = place(self.grid, piece)
        # input untouched
        self.assertTrue(np.all(self.grid == 0))
        for x, y in piece.cells():
            self.assertEqual(placed[y, x], 3)
        self.assertEqual(int(np.count_nonzero(placed)), 4)

    def test_place_skips_out_of_bounds(self):
        piece = make_piece(ShapeType.I, x=12, y=0)
        placed = place(self.grid, piece)
        self.assertEqual(int(np.count_nonzero(placed)), 2)

    def test_remove_cells(self):
        self.grid[0, 0] = 1
        self.grid[1, 1] = 1
        cleared = remove_cells(self.grid, [(0, 0), (20, 20)])
        self.assertEqual(cleared[0, 0], 0)
        self.assertEqual(cleared[1, 1], 1)
        self.assertEqual(self.grid[0, 0], 1)

    def test_apply_gravity(self):
        self.grid[2, 0] = 1
        self.grid[5, 0] = 2
        self.grid[13, 1] = 3
        settled = apply_gravity(self.grid)
        self.assertEqual(settled[12, 0], 1)
        self.assertEqual(settled[13, 0], 2)
        self.assertEqual(settled[13, 1], 3)
        self.assertEqual(int(np.count_nonzero(settled)), 3)

    def test_is_edge_full(self):
        for edge in Edge:
            self.assertFalse(is_edge_full(self.grid, edge))
        self.grid[0, 7] = 1
        self.assertTrue(is_edge_full(self.grid, Edge.TOP))
        self.assertFalse(is_edge_full(self.grid, Edge.BOTTOM))
        self.grid[6, 13] = 1
        self.assertTrue(is_edge_full(self.grid, Edge.RIGHT))
        self.assertFalse(is_edge_full(self.grid, Edge.LEFT))
        self.grid[13, 0] = 1
        self.assertTrue(is_edge_full(self.grid, Edge.BOTTOM))
        self.assertTrue(is_edge_full(self.grid, Edge.LEFT))


if __name__ == '__main__':
    unittest.main()
