[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "huskki"
version = "0.1.0"
description = "Live dashboard for engine sensor frames read over serial or replayed from raw logs"
requires-python = ">=3.10"
keywords = ["can-bus", "ecu", "dashboard", "serial", "telemetry", "server-sent-events"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: Web Environment",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Visualization",
]
dependencies = [
    "pyserial",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
huskki = "huskki.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["huskki"]

[tool.pytest.ini_options]
addopts = "-ra"
