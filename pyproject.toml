[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sapper"
version = "1.0.0"
description = "Classic Minesweeper with a Tk window and a two-player network mode over TCP"
requires-python = ">=3.10"
keywords = ["minesweeper", "sapper", "game", "puzzle", "tkinter"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: X11 Applications",
    "Intended Audience :: End Users/Desktop",
    "Natural Language :: Russian",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Puzzle Games",
]
dependencies = [
    "platformdirs",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
sapper = "sapper.gui:main"

[tool.hatch.build.targets.wheel]
packages = ["sapper"]

[tool.pytest.ini_options]
addopts = "-ra"
