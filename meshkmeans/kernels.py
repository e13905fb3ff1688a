"""Kernel functions for kernel density estimation."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Union

import numpy as np

Vector = Union[Sequence[float], np.ndarray]


def _squared_norm(u: Vector) -> tuple[float, int]:
    arr = np.asarray(u, dtype=float).ravel()
    return float(arr @ arr), arr.size


def gaussian(u: Vector) -> float:
    """Standard multivariate normal density."""
    sq, d = _squared_norm(u)
    coeff = 1.0 / math.pow(2.0 * math.pi, d / 2.0)
    return coeff * math.exp(-0.5 * sq)


def epanechnikov(u: Vector) -> float:
    sq, _ = _squared_norm(u)
    return 0.75 * (1.0 - sq) if sq <= 1.0 else 0.0


def uniform(u: Vector) -> float:
    sq, _ = _squared_norm(u)
    return 0.5 if math.sqrt(sq) <= 1.0 else 0.0


def triangular(u: Vector) -> float:
    norm = math.sqrt(_squared_norm(u)[0])
    return 1.0 - norm if norm <= 1.0 else 0.0


def biweight(u: Vector) -> float:
    sq, _ = _squared_norm(u)
    if sq <= 1.0:
        term = 1.0 - sq
        return 15.0 / 16.0 * term * term
    return 0.0


def triweight(u: Vector) -> float:
    sq, _ = _squared_norm(u)
    if sq <= 1.0:
        term = 1.0 - sq
        return 35.0 / 32.0 * term * term * term
    return 0.0


def cosine(u: Vector) -> float:
    norm = math.sqrt(_squared_norm(u)[0])
    if norm <= 1.0:
        return (math.pi / 4.0) * math.cos(math.pi * norm / 2.0)
    return 0.0