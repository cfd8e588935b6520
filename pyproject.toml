[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "reskernels"
version = "0.1.0"
description = "Modular-redundancy kernel execution, fault injection and file-backed checkpointing for array data"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "resilience",
    "checkpointing",
    "modular redundancy",
    "fault injection",
    "majority vote",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["reskernels"]

[tool.pytest.ini_options]
addopts = "-ra"
