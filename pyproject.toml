[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "centralext"
version = "0.1.0"
description = "Spreadsheet conversion of device profiles and devices, and a system management HTTP client"
requires-python = ">=3.10"
dependencies = []
keywords = ["xlsx", "device-profile", "iot", "edge", "spreadsheet", "http-client"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["centralext"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
