[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kxoengine"
version = "0.1.0"
description = "A 4x4 tic-tac-toe engine where an MCTS player and a negamax player play each other"
requires-python = ">=3.10"
dependencies = []
keywords = ["tic-tac-toe", "mcts", "negamax", "zobrist", "game-engine"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Board Games",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
kxo = "kxoengine.client:main"

[tool.hatch.build.targets.wheel]
packages = ["kxoengine"]

[tool.pytest.ini_options]
addopts = "-ra"
