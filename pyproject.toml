[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "horizonkit"
version = "0.1.0"
description = "Building blocks for CQRS and event-sourced applications: event matchers, handler middleware, WSGI adapters and two example domains"
requires-python = ">=3.10"
dependencies = []
keywords = ["cqrs", "event-sourcing", "events", "aggregates", "projections", "sagas", "wsgi"]
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
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
horizonkit-coverage = "horizonkit.coverage:main"

[tool.hatch.build.targets.wheel]
packages = ["horizonkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
