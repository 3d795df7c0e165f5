[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "orbitjob"
version = "0.1.0"
description = "Tick loops, runtime settings, health endpoints, job read validation and OpenAPI YAML rendering for a job orchestration system"
requires-python = ">=3.10"
keywords = ["scheduler", "cron", "jobs", "dispatcher", "worker", "heartbeat", "openapi"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["orbitjob"]

[tool.pytest.ini_options]
addopts = "-ra"
