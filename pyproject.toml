[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "elecsim"
version = "0.1.0"
description = "Tile-based electricity simulation with a probe runner for circuit behaviour tests"
requires-python = ">=3.10"
dependencies = []
keywords = ["simulation", "circuits", "logic", "grid", "signals"]
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
    "Topic :: Scientific/Engineering :: Electronic Design Automation (EDA)",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
elecsim-prober = "elecsim.prober:main"

[tool.hatch.build.targets.wheel]
packages = ["elecsim"]

[tool.pytest.ini_options]
addopts = "-ra"
