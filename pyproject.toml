[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ocitarball"
version = "0.1.0"
description = "Build OCI image tarballs for WebAssembly modules and components"
requires-python = ">=3.10"
dependencies = []
keywords = ["oci", "container", "image", "tarball", "wasm", "webassembly", "wasi"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Archiving :: Packaging",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
oci-tar-builder = "ocitarball.cli:main"
wasi-demo-app = "ocitarball.demo_app:main"

[tool.hatch.build.targets.wheel]
packages = ["ocitarball"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
