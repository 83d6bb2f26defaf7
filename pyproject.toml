[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "defender"
version = "1.0.0"
description = "Rule-driven inspection engine for HTTP traffic: resolves targets in requests and responses, transforms them and compares them against rules."
requires-python = ">=3.10"
keywords = ["waf", "firewall", "security", "http", "rules", "inspection"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
    "Topic :: Internet :: WWW/HTTP",
]
dependencies = [
    "brotli>=1.1",
    "zstandard>=0.22",
    "pyyaml>=6.0",
    "xmltodict>=0.13",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
    "responses>=0.24",
]

[tool.hatch.build.targets.wheel]
packages = ["defender"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
