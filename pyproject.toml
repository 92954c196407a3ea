[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "planarodom"
version = "0.1.0"
description = "Planar laser odometry from consecutive range scans, with pose, sensor and statistics utilities"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "odometry",
    "lidar",
    "laser",
    "range flow",
    "robotics",
    "pose",
    "eigen decomposition",
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
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["planarodom"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
