[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "efibootkit"
version = "0.1.0"
description = "EFI load options, UCS-2 strings, GUID tables and Linux sysfs block-device probing"
requires-python = ">=3.10"
dependencies = []
keywords = ["efi", "uefi", "boot", "load-option", "sysfs", "block-device", "guid", "ucs-2"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Boot",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["efibootkit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
