[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "productapi"
version = "0.1.0"
description = "A small product catalogue HTTP API served as a WSGI application, backed by a JSON file."
requires-python = ">=3.10"
dependencies = []
keywords = ["wsgi", "rest", "api", "products", "json", "crud"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
productapi = "productapi.main:main"

[tool.hatch.build.targets.wheel]
packages = ["productapi"]

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
warn_redundant_casts = true
