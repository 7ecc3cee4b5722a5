[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dxforge"
version = "0.1.3"
description = "Core pieces for DX developer tools: dx component detection, a language server core, Rust symbol extraction, authentication, content-addressed blob storage and repository setup"
requires-python = ">=3.10"
dependencies = [
    "lz4",
]
keywords = ["developer-tools", "lsp", "dx", "blob-storage", "components", "sqlite"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["dxforge"]

[tool.hatch.build.targets.sdist]
include = ["dxforge", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
