[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "taskweave"
version = "0.1.1"
description = "Task-graph utilities: cycle detection, chunked parallel algorithms, parameterized compositions, debug logging and a live metrics dashboard"
requires-python = ">=3.10"
dependencies = []
keywords = ["task", "graph", "parallel", "dag", "topological-sort", "dashboard", "logging"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["taskweave"]

[tool.pytest.ini_options]
addopts = "-ra"
