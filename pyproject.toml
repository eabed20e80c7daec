[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "neurokv"
version = "0.1.0"
description = "A small in-memory key-value store server and command-line client, with a Raft-style replicated log"
requires-python = ">=3.10"
dependencies = []
keywords = ["key-value", "database", "raft", "log", "tcp", "server"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
    "hypothesis",
]

[project.scripts]
neurod = "neurokv.server:main"
neuroctl = "neurokv.client:main"

[tool.hatch.build.targets.wheel]
packages = ["neurokv"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
