import random
import unittest
import numpy as np

from l2w_puzzle.constants import PIECE_COLORS
from l2w_puzzle.game.generator import PieceGenerator
from l2w_puzzle.game.orientation import spawn_position
from l2w_puzzle.game.pieces import BASE_SHAPES, FallingPiece, ShapeType, rotate_mask


class TestPieces(unittest.TestCase):

    def test_catalog(self):
        self.assertEqual(len(BASE_SHAPES), 9)
        self.assertEqual(int(BASE_SHAPES[ShapeType.C].sum()), 5)
        self.assertEqual(int(BASE_SHAPES[ShapeType.I].sum()), 4)

    def test_rotation_order_four(self):
        for kind, mask in BASE_SHAPES.items():
            rotated = mask
            for _ in range(4):
                rotated = rotate_mask(rotated)
            self.assertTrue(np.array_equal(rotated, mask), kind.name)

    def test_rotation_is_clockwise(self):
        rotated = rotate_mask(BASE_SHAPES[ShapeType.L])
        expected = np.array([[1, 1, 1], [1, 0, 0]])
        self.assertTrue(np.array_equal(rotated, expected))
        self.assertEqual(rotate_mask(BASE_SHAPES[ShapeType.I]).shape, (4, 1))

    def test_piece_helpers(self):
        piece = FallingPiece(ShapeType.O, PIECE_COLORS[3], BASE_SHAPES[ShapeType.O].copy(), x=2, y=5)
        self.assertEqual(piece.color_value, 4)
        self.assertEqual(sorted(piece.cells()), [(2, 5), (2, 6), (3, 5), (3, 6)])
        moved = piece.moved(1, -1)
        self.assertEqual((moved.x, moved.y), (3, 4))
        self.assertEqual((piece.x, piece.y), (2, 5))
        self.assertTrue(piece.same_as(piece.at(2, 5)))
        self.assertFalse(piece.same_as(moved))


class TestGenerator(unittest.TestCase):

    def test_color_never_repeats(self):
        gen = PieceGenerator(random.Random(11))
        last = None
        for _ in range(200):
            piece = gen.generate(last)
            self.assertNotEqual(piece.color, last)
            last = piece.color

    def test_single_color_palette_falls_back(self):
        gen = PieceGenerator(random.Random(1), palette=[PIECE_COLORS[0]])
        piece = gen.generate(PIECE_COLORS[0])
        self.assertEqual(piece.color, PIECE_COLORS[0])

    def test_spawns_at_level_anchor(self):
        gen = PieceGenerator(random.Random(5), shapes=[ShapeType.T])
        piece = gen.generate(None, level=1)
        self.assertEqual((piece.x, piece.y), spawn_position(1, 3, 2))
        piece = gen.generate(None, level=3)
        self.assertEqual(piece.x, 14 - piece.width)


if __name__ == '__main__':
    unittest.main()
