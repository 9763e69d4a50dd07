import unittest
import numpy as np

from l2w_puzzle.config import GameConfig
from l2w_puzzle.constants import PIECE_COLORS
from l2w_puzzle.game.controls import Intent
from l2w_puzzle.game.core import PartAEngine
from l2w_puzzle.game.orientation import Direction
from l2w_puzzle.game.pieces import BASE_SHAPES, FallingPiece, ShapeType
from l2w_puzzle.scheduler import Scheduler
from l2w_puzzle.state import GameState


RED = PIECE_COLORS[0]


def make_piece(kind: ShapeType, x: int, y: int, color: str = RED) -> FallingPiece:
    return FallingPiece(kind=kind, color=color, mask=BASE_SHAPES[kind].copy(), x=x, y=y)


class TestPartAEngine(unittest.TestCase):

    def setUp(self):
        self.finished = []
        self.scheduler = Scheduler()
        self.state = GameState()
        self.engine = PartAEngine(
            self.state,
            GameConfig(random_seed=42),
            scheduler=self.scheduler,
            on_finished=lambda: self.finished.append(True),
        )
        self.engine.start()

    def test_start_spawns_two_pieces(self):
        engine = self.engine
        self.assertIsNotNone(engine.current_piece)
        self.assertIsNotNone(engine.next_piece)
        self.assertNotEqual(engine.current_piece.color, engine.next_piece.color)
        self.assertEqual(engine.current_piece.y, 0)
        self.assertEqual(self.scheduler.pending(PartAEngine.TIMER_GROUP), 1)

    def test_fall_timer_moves_piece(self):
        y = self.engine.current_piece.y
        self.scheduler.advance(999)
        self.assertEqual(self.engine.current_piece.y, y)
        self.scheduler.advance(1)
        self.assertEqual(self.engine.current_piece.y, y + 1)

    def test_drop_locks_and_promotes_next(self):
        engine = self.engine
        dropped = engine.current_piece
        upcoming = engine.next_piece
        self.assertTrue(engine.drop())
        self.assertIsNone(engine.current_piece)
        self.assertTrue(engine.resolving)
        self.assertEqual(int(np.count_nonzero(engine.grid)), int(dropped.mask.sum()))
        self.assertEqual(engine.last_color, dropped.color)

        self.scheduler.flush(PartAEngine.TIMER_GROUP)
        self.assertFalse(engine.resolving)
        self.assertEqual(engine.current_piece.kind, upcoming.kind)
        self.assertNotEqual(engine.current_piece.color, dropped.color)
        self.assertNotEqual(engine.next_piece.color, engine.current_piece.color)

    def test_l_block_clear_after_delay(self):
        engine = self.engine
        for r, c in [(11, 0), (12, 0), (13, 0), (13, 1)]:
            engine.grid[r, c] = 1
        engine.current_piece = make_piece(ShapeType.O, x=2, y=0)
        engine.drop()
        self.scheduler.advance(399)
        self.assertEqual(self.state.rfb_count, 0)
        self.scheduler.advance(1)
        self.assertEqual(self.state.rfb_count, 1)
        self.assertEqual(self.state.score, 100)
        for r, c in [(11, 0), (12, 0), (13, 0), (13, 1), (13, 2)]:
            self.assertEqual(engine.grid[r, c], 0)
        for r, c in [(12, 2), (12, 3), (13, 3)]:
            self.assertEqual(engine.grid[r, c], 1)

    def test_edge_full_ends_phase(self):
        engine = self.engine
        engine.grid[0, 13] = 3
        engine.current_piece = make_piece(ShapeType.I, x=0, y=0)
        engine.drop()
        self.scheduler.flush(PartAEngine.TIMER_GROUP)
        self.assertTrue(engine.finished)
        self.assertEqual(self.finished, [True])
        self.assertIsNone(engine.current_piece)
        self.assertEqual(self.scheduler.pending(PartAEngine.TIMER_GROUP), 0)

    def test_blocked_spawn_ends_phase(self):
        engine = self.engine
        engine.next_piece = make_piece(ShapeType.O, x=0, y=0, color=PIECE_COLORS[1])
        engine.grid[1, 6] = 3
        engine.current_piece = make_piece(ShapeType.I, x=0, y=0)
        engine.drop()
        self.scheduler.flush(PartAEngine.TIMER_GROUP)
        self.assertTrue(engine.finished)

    def test_horizontal_moves(self):
        engine = self.engine
        engine.current_piece = make_piece(ShapeType.O, x=5, y=3)
        self.assertTrue(engine.move_left())
        self.assertEqual(engine.current_piece.x, 4)
        self.assertTrue(engine.apply(Intent.MOVE_RIGHT))
        self.assertEqual(engine.current_piece.x, 5)
        engine.current_piece = make_piece(ShapeType.O, x=0, y=3)
        self.assertFalse(engine.move_left())

    def test_vertical_moves_only_sideways_levels(self):
        engine = self.engine
        engine.current_piece = make_piece(ShapeType.O, x=5, y=3)
        self.assertFalse(engine.move_vertical(Direction.UP))
        self.state.level = 3
        self.assertTrue(engine.move_vertical(Direction.UP))
        self.assertEqual(engine.current_piece.y, 2)

    def test_rotate(self):
        engine = self.engine
        engine.current_piece = make_piece(ShapeType.I, x=4, y=4)
        self.assertTrue(engine.rotate())
        self.assertEqual(engine.current_piece.mask.shape, (4, 1))
        engine.current_piece = make_piece(ShapeType.I, x=4, y=12)
        self.assertFalse(engine.rotate())

    def test_drop_in_direction(self):
        engine = self.engine
        engine.current_piece = make_piece(ShapeType.O, x=5, y=5)
        engine.apply(Intent.DROP_LEFT)
        self.assertEqual(engine.grid[5, 0], 1)
        self.assertEqual(engine.grid[6, 1], 1)

    def test_stop_cancels_pending_resolution(self):
        engine = self.engine
        engine.drop()
        engine.stop()
        self.assertEqual(self.scheduler.pending(PartAEngine.TIMER_GROUP), 0)
        self.assertFalse(engine.move_left())

    def test_falls_left_on_level_three(self):
        state = GameState(level=3)
        engine = PartAEngine(state, GameConfig(random_seed=3), scheduler=Scheduler())
        engine.start()
        piece = engine.current_piece
        self.assertEqual(piece.x, 14 - piece.width)
        engine.tick()
        self.assertEqual(engine.current_piece.x, piece.x - 1)

    def test_state_overlay(self):
        engine = self.engine
        engine.current_piece = make_piece(ShapeType.O, x=0, y=0)
        state = engine.get_state()
        self.assertEqual(state[0, 0], -1)
        self.assertEqual(engine.grid[0, 0], 0)


if __name__ == '__main__':
    unittest.main()
