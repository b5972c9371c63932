[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "navindexer"
version = "0.1.0"
description = "Block, transaction, soft fork and DAO indexing models and services for a NavCoin block explorer"
requires-python = ">=3.10"
keywords = ["navcoin", "blockchain", "explorer", "indexer", "dao", "soft-fork"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
    "Typing :: Typed",
]
dependencies = [
    "python-slugify",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["navindexer"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
