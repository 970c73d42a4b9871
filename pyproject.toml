[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ticknowledge"
version = "1.0.0"
description = "Knowledge base storage with question tracking, file uploads, a context dashboard and an HTTP API"
requires-python = ">=3.10"
keywords = ["knowledge-base", "dashboard", "uploads", "flask", "sqlalchemy"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
]
dependencies = [
    "sqlalchemy>=2.0",
    "flask>=2.3",
    "python-dotenv>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
ticknowledge-server = "ticknowledge.app:main"
ticknowledge-seed = "ticknowledge.seed:main"

[tool.hatch.build.targets.wheel]
packages = ["ticknowledge"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
