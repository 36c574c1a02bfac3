# Path: ris/search/metrics.py
# Purpose: Distance functions comparing a probe descriptor against a batch of indexed descriptors.
# Layer: ris/search.
# Details: Every metric returns non-negative distances, zero for identical vectors.

from __future__ import annotations

from typing import Callable, Dict

import numpy as np

from ris.errors import InvalidArgument

Metric = Callable[[np.ndarray, np.ndarray], np.ndarray]


def tanimoto_distance(batch: np.ndarray, probe: np.ndarray) -> np.ndarray:
    """``1 - a.b / (|a|^2 + |b|^2 - a.b)``; 0 when both vectors are zero, 1 when only one is."""

    batch = batch.astype(np.float64)
    probe = probe.astype(np.float64)
    identical = np.all(batch == probe, axis=1)
    dot = batch @ probe
    batch_sq = np.einsum("ij,ij->i", batch, batch)
    probe_sq = float(probe @ probe)
    denom = batch_sq + probe_sq - dot
    distances = np.where(denom > 0, 1.0 - dot / np.where(denom > 0, denom, 1.0), 0.0)
    both_zero = (batch_sq == 0) & (probe_sq == 0)
    one_zero = (batch_sq == 0) != (probe_sq == 0)
    distances = np.where(both_zero | identical, 0.0, np.where(one_zero, 1.0, distances))
    return np.clip(distances, 0.0, None)


def euclidean_distance(batch: np.ndarray, probe: np.ndarray) -> np.ndarray:
    """Plain L2 distance."""

    diff = batch.astype(np.float64) - probe.astype(np.float64)
    return np.sqrt(np.einsum("ij,ij->i", diff, diff))


def chi_square_distance(batch: np.ndarray, probe: np.ndarray, eps: float = 1e-12) -> np.ndarray:
    """``0.5 * sum((a - b)^2 / (a + b))`` over bins where ``a + b`` is non-zero."""

    batch = batch.astype(np.float64)
    probe = probe.astype(np.float64)
    total = batch + probe
    diff_sq = (batch - probe) ** 2
    terms = np.where(np.abs(total) > eps, diff_sq / np.where(np.abs(total) > eps, total, 1.0), 0.0)
    return np.clip(0.5 * terms.sum(axis=1), 0.0, None)


METRICS: Dict[str, Metric] = {
    "tanimoto": tanimoto_distance,
    "euclidean": euclidean_distance,
    "chi_square": chi_square_distance,
}


def get_metric(name: str) -> Metric:
    """Look up a metric by name."""

    try:
        return METRICS[name.strip().lower()]
    except KeyError as exc:
        raise InvalidArgument(f"Unknown metric {name!r}; expected one of {sorted(METRICS)}.") from exc


__all__ = ["Metric", "METRICS", "get_metric", "tanimoto_distance", "euclidean_distance", "chi_square_distance"]
