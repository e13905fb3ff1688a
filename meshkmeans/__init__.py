"""K-means clustering of point sets and triangle meshes, with kd-tree Euclidean
and Dijkstra geodesic metrics and several centroid initialisers."""

__version__ = "0.1.0"