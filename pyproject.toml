[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "doint"
version = "0.1.0"
description = "A small community currency economy: balances, a central bank with taxes and UBI, transfers with fees, a jail, robberies and admin commands on SQLite."
requires-python = ">=3.10"
dependencies = []
keywords = ["economy", "currency", "game", "bank", "taxes", "sqlite"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["doint"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
