[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "meshsec"
version = "0.1.0"
description = "Mesh security module logic: virtual staking max caps, delegation accounting and a block-height task scheduler"
requires-python = ">=3.10"
dependencies = []
keywords = ["staking", "virtual-staking", "mesh-security", "scheduler", "blockchain"]
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

[tool.hatch.build.targets.wheel]
packages = ["meshsec"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
