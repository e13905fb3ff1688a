[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "meshkmeans"
version = "0.1.0"
description = "K-means clustering of point sets and triangle meshes with Euclidean and geodesic metrics"
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = [
    "k-means",
    "clustering",
    "mesh segmentation",
    "kd-tree",
    "kernel density estimation",
    "geodesic",
    "dijkstra",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Mathematics",
    "Topic :: Multimedia :: Graphics :: 3D Modeling",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["meshkmeans"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
