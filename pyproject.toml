[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xv6tools"
version = "0.1.0"
description = "Models of a teaching kernel's paging, file descriptors, shell parser and small user tools"
requires-python = ">=3.10"
dependencies = []
keywords = ["operating-system", "paging", "page-table", "shell", "grep", "malloc", "teaching"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
xv6-grep = "xv6tools.grep:main"
xv6-wc = "xv6tools.wc:main"

[tool.hatch.build.targets.wheel]
packages = ["xv6tools"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
