[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fcctransport"
version = "0.1.0"
description = "Monte Carlo particle transport building blocks on a face-centred cubic tetrahedral mesh"
requires-python = ">=3.10"
dependencies = []
keywords = ["monte carlo", "neutron transport", "mesh", "fcc", "simulation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["fcctransport"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
