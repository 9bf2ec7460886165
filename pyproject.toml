[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nixfront"
version = "0.1.0"
description = "Error-tolerant lexer and parser for the Nix expression language, with diagnostics and fix-it hints"
requires-python = ">=3.10"
dependencies = []
keywords = ["nix", "parser", "lexer", "syntax", "diagnostics", "concrete-syntax-tree"]
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
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
nixf-ast-dump = "nixfront.ast_dump:main"

[tool.hatch.build.targets.wheel]
packages = ["nixfront"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
