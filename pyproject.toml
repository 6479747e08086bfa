[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "coolmyir"
version = "0.1.0"
description = "Class layouts, an SSA intermediate representation and optimisation passes for a Cool compiler back end"
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "ir", "ssa", "cool", "control-flow-graph", "dominance"]
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
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["coolmyir"]

[tool.pytest.ini_options]
addopts = "-ra"
