import numpy as np
import pandas as pd
from typing import Dict, Optional, Sequence, Tuple

DEFAULT_QUANTILES = (0.025, 0.25, 0.5, 0.75, 0.975)

# cumulative weights closer than this to the requested quantile count as a tie
_TIE_TOLERANCE = 1e-12


def weighted_quantile(values: np.ndarray, weights: np.ndarray, q: float) -> float:
    """
    Weighted quantile of a discrete distribution

    Points are sorted by value and their weights normalized to a cumulative
    distribution. The quantile is the first value whose cumulative weight
    reaches q; when the cumulative weight lands exactly on q the value is
    averaged with the next value carrying positive weight, so equal weights
    give the ordinary median.

    Parameters:
    -----------
    values: np.ndarray
        Support values
    weights: np.ndarray
        Non-negative weights, need not sum to 1
    q: float
        Quantile in [0, 1]

    Returns:
    --------
    float
        The quantile, or nan when there is no positive weight
    """
    if not 0 <= q <= 1:
        raise ValueError(f"Quantile must be within [0, 1], got {q}")

    values = np.asarray(values, dtype=float).flatten()
    weights = np.asarray(weights, dtype=float).flatten()
    if len(values) != len(weights):
        raise ValueError(f"Length mismatch: values ({len(values)}) != weights ({len(weights)})")

    mask = ~(np.isnan(values) | np.isnan(weights))
    values = values[mask]
    weights = weights[mask]
    if len(values) == 0:
        return np.nan

    order = np.argsort(values, kind='mergesort')
    values = values[order]
    weights = weights[order]

    total = np.sum(weights)
    if total <= 0:
        return np.nan
    cdf = np.cumsum(weights) / total

    idx = int(np.searchsorted(cdf, q - _TIE_TOLERANCE, side='left'))
    idx = min(idx, len(values) - 1)
    if abs(cdf[idx] - q) <= _TIE_TOLERANCE:
        # zero-weight points between the two masses do not count
        later = np.nonzero(weights[idx + 1:] > 0)[0]
        if len(later) > 0:
            return float((values[idx] + values[idx + 1 + later[0]]) / 2)
    return float(values[idx])


def weighted_iqr(values: np.ndarray, weights: np.ndarray) -> Tuple[float, float]:
    """Weighted 25th and 75th percentiles"""
    return (weighted_quantile(values, weights, 0.25),
            weighted_quantile(values, weights, 0.75))


def summarize_points(
    points: pd.DataFrame,
    quantiles: Sequence[float] = DEFAULT_QUANTILES,
    prob_col: str = 'prob'
) -> pd.DataFrame:
    """
    Weighted quantiles of every parameter in a points table

    Parameters:
    -----------
    points: pd.DataFrame
        One row per support point, one column per parameter plus a probability column
    quantiles: Sequence[float]
        Quantiles to compute for each parameter
    prob_col: str
        Name of the probability column

    Returns:
    --------
    pd.DataFrame
        Long table with columns par, type, quantile and value. The weighted
        median rows carry type 'WtMed', all others 'WtQuant'.
    """
    if prob_col not in points.columns:
        raise ValueError(f"Probability column '{prob_col}' not found in points")

    weights = points[prob_col].to_numpy(dtype=float)
    rows = []
    for par in points.columns:
        if par == prob_col:
            continue
        values = points[par].to_numpy(dtype=float)
        for q in quantiles:
            rows.append({
                'par': par,
                'type': 'WtMed' if q == 0.5 else 'WtQuant',
                'quantile': q,
                'value': weighted_quantile(values, weights, q)
            })

    return pd.DataFrame(rows, columns=['par', 'type', 'quantile', 'value'])


def cov2cor(cov: np.ndarray) -> np.ndarray:
    """Scale a covariance matrix into a correlation matrix"""
    cov = np.asarray(cov, dtype=float)
    with np.errstate(invalid='ignore', divide='ignore'):
        sd = np.sqrt(np.diag(cov))
        cor = cov / np.outer(sd, sd)
    np.fill_diagonal(cor, 1.0)
    return cor


def weighted_cov(x: np.ndarray, weights: np.ndarray) -> Dict[str, Optional[np.ndarray]]:
    """
    Maximum-likelihood weighted covariance and correlation

    Weights are normalized to sum to 1 and the covariance is
    sum(w * (x - center)(x - center)^T), i.e. divided by the weight sum and
    not by the weight sum minus one.

    Returns:
    --------
    Dict with 'cov', 'cor' and 'center'
    """
    x = np.asarray(x, dtype=float)
    if x.ndim == 1:
        x = x.reshape(-1, 1)
    weights = np.asarray(weights, dtype=float).flatten()
    if x.shape[0] != len(weights):
        raise ValueError(f"Length mismatch: rows ({x.shape[0]}) != weights ({len(weights)})")
    if np.any(weights < 0):
        raise ValueError("Weights must be non-negative")

    nvar = x.shape[1]
    total = np.sum(weights)
    if x.shape[0] == 0 or total <= 0:
        nan_matrix = np.full((nvar, nvar), np.nan)
        return {'cov': nan_matrix, 'cor': nan_matrix.copy(), 'center': np.full(nvar, np.nan)}

    w = weights / total
    center = w @ x
    centered = x - center
    cov = (centered * w[:, None]).T @ centered

    with np.errstate(invalid='ignore', divide='ignore'):
        sd = np.sqrt(np.diag(cov))
        cor = cov / np.outer(sd, sd)

    return {'cov': cov, 'cor': cor, 'center': center}
