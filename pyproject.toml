[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gamequery"
version = "0.1.0"
description = "Query Minecraft, Mindustry, Savage 2 and Eco servers for their status"
requires-python = ">=3.10"
dependencies = []
keywords = ["game", "server", "query", "minecraft", "mindustry", "savage2", "eco", "status"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment",
    "Topic :: Internet",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["gamequery"]

[tool.pytest.ini_options]
addopts = "-ra"
