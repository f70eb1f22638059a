[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "locsheet"
version = "0.1.0"
description = "CSV string-table localization with primary-language sync, status tracking and per-locale statistics"
requires-python = ">=3.10"
dependencies = []
keywords = ["localization", "translation", "csv", "string table", "i18n", "l10n"]
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
    "Topic :: Software Development :: Localization",
    "Topic :: Software Development :: Internationalization",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["locsheet"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
