[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mavtraj"
version = "0.1.0"
description = "Piecewise polynomial trajectories for aerial vehicles: evaluation, extrema, time scaling, sampling and YAML storage."
requires-python = ">=3.10"
keywords = [
    "trajectory",
    "polynomial",
    "robotics",
    "uav",
    "multirotor",
    "jenkins-traub",
    "motion planning",
]
classifiers = [
    "Development Status :: 4 - Beta",
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
    "Topic :: Scientific/Engineering :: Mathematics",
]
dependencies = [
    "numpy",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["mavtraj"]

[tool.pytest.ini_options]
addopts = "-ra"
