[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "citc"
version = "0.1.0"
description = "Lexer and diagnostics for a small C-like language, and the building blocks of a 32-bit x86 assembler that writes relocatable ELF objects"
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "lexer", "assembler", "x86", "elf"]
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
    "Topic :: Software Development :: Compilers",
    "Topic :: Software Development :: Assemblers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["citc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
