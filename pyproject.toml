[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "patronus"
version = "0.35.0"
description = "Interned bit-vector and array expressions with type checking, evaluation, transformation and simplification"
requires-python = ">=3.10"
dependencies = []
keywords = ["smt", "bit-vector", "hardware verification", "expressions", "simplification", "hash-consing"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Electronic Design Automation (EDA)",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["patronus"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
