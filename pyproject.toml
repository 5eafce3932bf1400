[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fat32kit"
version = "0.1.0"
description = "Parse, check and describe FAT32 on-disk structures: boot sector, FSInfo, directory entries and long file names."
requires-python = ">=3.10"
dependencies = []
keywords = ["fat32", "filesystem", "directory entry", "long file name", "8.3", "utf-8"]
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
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["fat32kit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
