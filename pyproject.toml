[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pingload"
version = "0.1.0"
description = "Load generator and latency reporter for a Ping/Pong smart contract on an EVM chain"
requires-python = ">=3.10"
keywords = ["ethereum", "evm", "load-testing", "latency", "json-rpc", "eip-1559"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Testing :: Traffic Generation",
]
dependencies = [
    "pycryptodome",
    "requests",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
pingload = "pingload.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["pingload"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
