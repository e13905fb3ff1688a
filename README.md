# meshkmeans

K-means clustering for point sets and for the faces of triangle meshes.

- `meshkmeans.euclidean.EuclideanMetric` fits centroids to points of any
  dimension under the Euclidean distance. Each pass assigns points with a
  kd-tree filtering algorithm (`meshkmeans.kdtree.KdTree`). The metric stops
  when the centroids move on average no more than the threshold, or after 100
  iterations.
- `meshkmeans.geodesic.GeodesicDijkstraMetric` clusters the faces of a mesh by
  shortest paths over the face adjacency graph. A step between two adjacent
  faces costs the distance between their baricenters plus the sine of the
  angle between their normals, scaled by the mean distance between adjacent
  baricenters. It stops on the same threshold test, or after 200 iterations.
- `meshkmeans.kmeans.KMeans` chooses the initial centroids and runs a metric.

## Choosing initial centroids

`KMeans` takes one of the values of `meshkmeans.kmeans.CentroidInit`:

- `RANDOM`: distinct data points picked at random (`RandomCentroidInit`).
- `KDE`: peaks of a Gaussian kernel density estimate sampled on a regular grid
  (`meshkmeans.kde.KDE`). When there are too few peaks, the bandwidth shrinks
  and the search runs again. When there are too many, the most distant ones are
  kept.
- `MOST_DISTANT`: the first point, then again and again the point farthest
  from all centroids chosen so far (`MostDistantInit`).
- `KDE_3D`: a density-peak search on a nested three-dimensional grid
  (`meshkmeans.kde3d.KDE3D`). It works on three-dimensional data only.

The initialisers live in `meshkmeans.centroid_init`, `meshkmeans.kde` and
`meshkmeans.kde3d`, and each can be used on its own through
`find_centroids()`. The shared density estimate is `meshkmeans.kde_base.KDEBase`.
`meshkmeans.kernels` also has the Gaussian, Epanechnikov, uniform, triangular,
biweight, triweight and cosine kernels as plain functions.

## Installation

```
pip install .
```

## Clustering points

```python
from meshkmeans.point import Point
from meshkmeans.euclidean import EuclideanMetric
from meshkmeans.kmeans import KMeans, CentroidInit

points = [Point([x, y]) for x, y in [(0, 0), (0, 1), (10, 10), (10, 11)]]
metric = EuclideanMetric(points, 1e-4)
kmeans = KMeans(2, 1e-4, metric, CentroidInit.MOST_DISTANT)
kmeans.fit()
print(kmeans.report())
```

`EuclideanMetric` copies the points it is given. After `fit()`, each point in
`kmeans.points` (the metric's copies) refers to its centroid through its
`centroid` attribute. `kmeans.centroids` holds the fitted centroids.

## Segmenting a mesh

```python
from meshkmeans.mesh import Mesh
from meshkmeans.geodesic import GeodesicDijkstraMetric
from meshkmeans.kmeans import KMeans, CentroidInit

mesh = Mesh.from_obj("model.obj")
metric = GeodesicDijkstraMetric(mesh, 0.05, mesh.face_points())
kmeans = KMeans(5, 0.05, metric, CentroidInit.MOST_DISTANT)
kmeans.fit()
mesh.export_grouped_obj("segmented.obj")
```

`Mesh.from_obj` reads vertices and faces from an OBJ file. It splits polygons
into triangle fans and ignores normals, texture coordinates and groups.
`Mesh.face_cluster(face)` returns the cluster of a face, or -1 if the face has
none. `Mesh.export_obj(path, cluster)` writes only the faces of one cluster.
`Mesh.load_segmentation(path)` reads a reference `.seg` file with one cluster
number per line and returns the number of clusters it holds.

`EuclideanMetric` can also cluster mesh faces. Pass the mesh as its `mesh`
argument and its face baricenters as the data. After fitting, it labels each
face with its nearest centroid.

## Exported files

When `export_dir` is given to `KMeans` or to an initialiser, the data and the
chosen centroids are written there as `Mesh.csv` and `Centroids.csv`.
`KMeans.fit()` also writes the fitted centroids to `CentroidsFix.csv`. Each CSV
file has `x,y[,z],label` columns, with coordinates truncated to three decimals.
Without `export_dir`, nothing is written.

Progress and warnings go through the standard `logging` module.

## What the package does not do

- It has no command-line program. Everything is used from Python.
- It does not guess the number of clusters. `KMeans` needs a positive
  `num_clusters`.
- It has only the Dijkstra face-graph distance for geodesics. There is no
  heat-diffusion distance.
- It has no scores for comparing a segmentation against a reference one.
  `load_segmentation` only reads the reference labels into the mesh.

## Running the tests

```
pip install .[test]
pytest
```