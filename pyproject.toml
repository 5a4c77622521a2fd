[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zapkit"
version = "0.1.0"
description = "Building blocks for structured loggers: sinks, write syncers, buffered output, stack traces and test helpers"
requires-python = ">=3.11"
dependencies = []
keywords = ["logging", "sink", "write-syncer", "stacktrace", "buffering"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Logging",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
zapkit-readme = "zapkit.readme:main"

[tool.hatch.build.targets.wheel]
packages = ["zapkit"]

[tool.pytest.ini_options]
addopts = "-ra"
