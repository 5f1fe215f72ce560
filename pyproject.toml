[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tuplestore"
version = "0.1.0"
description = "A small page-based record manager with a buffer pool, fixed-size records, scans and filter expressions."
requires-python = ">=3.10"
dependencies = []
keywords = ["database", "record manager", "buffer pool", "page file", "storage"]
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
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tuplestore = "tuplestore.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["tuplestore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
