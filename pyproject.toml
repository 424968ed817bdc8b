[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "monkeylang"
version = "0.1.0"
description = "Syntax tree, bytecode compiler and tree-walking evaluator for the Monkey programming language"
requires-python = ">=3.10"
dependencies = []
keywords = ["monkey", "interpreter", "compiler", "bytecode", "evaluator", "language"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Interpreters",
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["monkeylang"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
