[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cnabkit"
version = "0.1.0"
description = "Export and import CNAB bundle archives, check schema versions and resolve values from the host"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["cnab", "bundle", "packaging", "archive", "credentials", "semver"]
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
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["cnabkit"]

[tool.pytest.ini_options]
addopts = "-ra"
