[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "syslab"
version = "0.1.0"
description = "A simulated heap with allocator trace parsing, payload range checks and scoring, plus a command-tree executor for a teaching shell"
requires-python = ">=3.10"
dependencies = []
keywords = ["malloc", "heap", "trace", "scoring", "shell", "education"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["syslab"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
