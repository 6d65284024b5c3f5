"""A 4x4 tic-tac-toe engine with MCTS and negamax players and a terminal viewer."""

__version__ = "0.1.0"

__all__ = ["client", "engine", "game", "mcts", "negamax", "xoroshiro", "zobrist"]