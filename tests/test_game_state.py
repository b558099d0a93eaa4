import random
import unittest

from core import DIRECTION, GameProgressState
from game_state import GameState
from tests.helpers import FixedRandom

N = None


def count_tiles(grid):
    return sum(1 for row in grid for cell in row if cell is not None)


class TestGameStateInitialization(unittest.TestCase):

    def test_default_game_has_two_tiles(self):
        game = GameState(rng=random.Random(7))
        grid = game.get_grid()
        self.assertEqual((len(grid), len(grid[0])), (4, 4))
        self.assertEqual(count_tiles(grid), 2)
        for row in grid:
            for cell in row:
                self.assertIn(cell, (None, 2, 4))

    def test_new_game_has_no_history(self):
        game = GameState(rng=random.Random(7))
        self.assertFalse(game.can_undo())
        self.assertEqual(game.history_depth(), 0)
        self.assertFalse(game.is_over())
        self.assertEqual(game.progress, GameProgressState.PLAYING)

    def test_custom_shape(self):
        game = GameState(rows=3, cols=5, rng=random.Random(1))
        grid = game.get_grid()
        self.assertEqual((len(grid), len(grid[0])), (3, 5))
        self.assertEqual((game.rows, game.cols), (3, 5))

    def test_start_from_grid(self):
        game = GameState(grid=[[2, N, 4]], rng=FixedRandom())
        self.assertEqual(game.get_grid(), [[2, N, 4]])
        self.assertEqual((game.rows, game.cols), (1, 3))

    def test_invalid_arguments(self):
        with self.assertRaises(ValueError):
            GameState(win_tile=0)
        with self.assertRaises(ValueError):
            GameState(rows=0)
        with self.assertRaises(ValueError):
            GameState(grid=[[2, 2], [2]])

    def test_reset_clears_history(self):
        game = GameState(grid=[[2, 2, N, N]], rng=FixedRandom())
        game.apply_move(DIRECTION.LEFT)
        game.reset()
        self.assertFalse(game.can_undo())
        self.assertEqual(count_tiles(game.get_grid()), 2)


class TestApplyMove(unittest.TestCase):

    def setUp(self):
        self.start = [[2, 2, N, N],
                      [N, N, N, N],
                      [N, N, N, N],
                      [N, N, N, N]]
        self.rng = FixedRandom()
        self.game = GameState(grid=self.start, rng=self.rng)

    def test_effective_move_spawns_and_records_history(self):
        self.assertTrue(self.game.apply_move(DIRECTION.LEFT))
        self.assertEqual(self.game.get_grid()[0], [4, 2, N, N])
        self.assertEqual(self.game.history_depth(), 1)
        self.assertTrue(self.game.can_undo())
        self.assertEqual(len(self.rng.choice_calls), 1)

    def test_blocked_move_is_a_no_op(self):
        grid = [[2, 4, N, N], [N, N, N, N], [N, N, N, N], [N, N, N, N]]
        game = GameState(grid=grid, rng=self.rng)
        self.assertFalse(game.apply_move(DIRECTION.LEFT))
        self.assertFalse(game.apply_move(DIRECTION.UP))
        self.assertEqual(game.get_grid(), grid)
        self.assertFalse(game.can_undo())
        self.assertEqual(self.rng.choice_calls, [])

    def test_move_then_undo_restores_grid(self):
        self.game.apply_move(DIRECTION.LEFT)
        self.assertTrue(self.game.undo())
        self.assertEqual(self.game.get_grid(), self.start)
        self.assertFalse(self.game.can_undo())

    def test_undo_pops_most_recent_first(self):
        self.game.apply_move(DIRECTION.LEFT)
        after_first = self.game.get_grid()
        self.game.apply_move(DIRECTION.DOWN)
        self.assertEqual(self.game.history_depth(), 2)
        self.game.undo()
        self.assertEqual(self.game.get_grid(), after_first)
        self.game.undo()
        self.assertEqual(self.game.get_grid(), self.start)

    def test_undo_with_empty_history_is_a_no_op(self):
        self.assertFalse(self.game.undo())
        self.assertEqual(self.game.get_grid(), self.start)

    def test_get_grid_returns_a_copy(self):
        grid = self.game.get_grid()
        grid[0][0] = 1024
        self.assertEqual(self.game.get_grid(), self.start)

    def test_round_trip_for_random_games(self):
        for seed in range(20):
            game = GameState(rng=random.Random(seed))
            for direction in DIRECTION:
                before = game.get_grid()
                if game.apply_move(direction):
                    game.undo()
                    self.assertEqual(game.get_grid(), before)
                    game.apply_move(direction)

    def test_available_moves(self):
        self.assertEqual(self.game.available_moves(),
                         [DIRECTION.DOWN, DIRECTION.LEFT, DIRECTION.RIGHT])


class TestGameOver(unittest.TestCase):

    def setUp(self):
        self.start = [[64, 64, N, N],
                      [N, N, N, N]]
        self.game = GameState(grid=self.start, win_tile=128, rng=FixedRandom())

    def test_reaching_threshold_ends_game(self):
        self.assertTrue(self.game.apply_move(DIRECTION.LEFT))
        self.assertTrue(self.game.is_over())
        self.assertEqual(self.game.progress, GameProgressState.OVER)

    def test_moves_are_ignored_once_over(self):
        self.game.apply_move(DIRECTION.LEFT)
        grid = self.game.get_grid()
        depth = self.game.history_depth()
        self.assertFalse(self.game.apply_move(DIRECTION.DOWN))
        self.assertEqual(self.game.get_grid(), grid)
        self.assertEqual(self.game.history_depth(), depth)

    def test_undo_after_over_resumes_play(self):
        self.game.apply_move(DIRECTION.LEFT)
        self.assertTrue(self.game.undo())
        self.assertFalse(self.game.is_over())
        self.assertEqual(self.game.get_grid(), self.start)
        self.assertTrue(self.game.apply_move(DIRECTION.DOWN))

    def test_over_from_the_start(self):
        game = GameState(grid=[[128, N]], rng=FixedRandom())
        self.assertTrue(game.is_over())
        self.assertFalse(game.apply_move(DIRECTION.RIGHT))
        self.assertEqual(game.get_grid(), [[128, N]])

    def test_configured_threshold(self):
        game = GameState(grid=[[2, 2]], win_tile=4, rng=FixedRandom())
        self.assertTrue(game.apply_move(DIRECTION.LEFT))
        self.assertTrue(game.is_over())


if __name__ == "__main__":
    unittest.main()
