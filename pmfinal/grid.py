import numpy as np
import pandas as pd
import warnings
from typing import Dict, List
from numba import jit

from .utils import cov2cor, summarize_points

# initial grid sizes by NPAG grid density index
GRID_POINTS = {1: 2129, 2: 5003, 3: 10007, 4: 20011, 5: 40009, 6: 80021}

# |sum(prob) - 1| above which the final cycle density is reported as unnormalized
PROB_SUM_TOLERANCE = 0.05


@jit(nopython=True)
def _weighted_cross_moments(values, weights):
    """Sum over points of x_i * x_k * w for every parameter pair"""
    npoints, nvar = values.shape
    moments = np.zeros((nvar, nvar))
    for i in range(nvar):
        for k in range(i, nvar):
            total = 0.0
            for p in range(npoints):
                total += values[p, i] * values[p, k] * weights[p]
            moments[i, k] = total
            moments[k, i] = total
    return moments


def grid_points(indpts: int) -> int:
    """Initial number of grid points requested for an NPAG run"""
    if indpts in GRID_POINTS:
        return GRID_POINTS[indpts]
    return (indpts - 100) * 80021


def cell_volume(ab: np.ndarray, gridpts: int) -> float:
    """Parameter space volume represented by one grid point"""
    ab = np.asarray(ab, dtype=float)
    return float(np.prod(ab[:, 1] - ab[:, 0]) / gridpts)


def population_points(corden: np.ndarray, par: List[str], w_par_vol: float) -> pd.DataFrame:
    """Final cycle support points with the density rescaled to a probability"""
    pop_points = pd.DataFrame(np.asarray(corden, dtype=float), columns=list(par) + ['prob'])
    pop_points['prob'] = pop_points['prob'] * w_par_vol
    return pop_points


def aggregate_grid(corden: np.ndarray, ab: np.ndarray, indpts: int,
                   nvar: int, par: List[str]) -> Dict:
    """
    Population moments of the final cycle NPAG support points

    Parameters:
    -----------
    corden: np.ndarray
        Support points, nvar parameter columns plus one density column
    ab: np.ndarray
        nvar x 2 parameter boundaries
    indpts: int
        Grid density index
    nvar: int
        Number of random parameters
    par: List[str]
        Parameter names

    Returns:
    --------
    Dict
        gridpts, w_par_vol, pop_points, pop_mean, pop_cov, pop_cor,
        pop_var, pop_sd, pop_cv and pop_median
    """
    corden = np.asarray(corden, dtype=float)
    if corden.ndim == 1:
        corden = corden.reshape(1, -1)

    gridpts = grid_points(indpts)
    w_par_vol = cell_volume(ab, gridpts)

    values = np.ascontiguousarray(corden[:, :nvar])
    density = np.ascontiguousarray(corden[:, nvar])

    if corden.shape[0] > 1:
        pop_mean = np.sum(values * density[:, None], axis=0) * w_par_vol
        pop_cov = (_weighted_cross_moments(values, density * w_par_vol)
                   - np.outer(pop_mean, pop_mean))
        if np.any(np.diag(pop_cov) == 0):
            pop_cor = np.full((nvar, nvar), np.nan)
        else:
            pop_cor = cov2cor(pop_cov)
    else:
        pop_mean = values[0] * density[0] * w_par_vol
        pop_cov = np.zeros((nvar, nvar))
        pop_cor = np.full((nvar, nvar), np.nan)
        np.fill_diagonal(pop_cor, 1.0)

    pop_points = population_points(corden, par, w_par_vol)
    prob_sum = pop_points['prob'].sum()
    if abs(prob_sum - 1) > PROB_SUM_TOLERANCE:
        warnings.warn(
            f"Final cycle probabilities sum to {prob_sum:.4g} instead of 1; "
            f"check indpts ({indpts}) and the boundaries"
        )

    point_summary = summarize_points(pop_points, quantiles=[0.5])
    pop_median = point_summary.loc[point_summary['type'] == 'WtMed', 'value'].to_numpy()

    pop_var = np.diag(pop_cov).copy()
    with np.errstate(invalid='ignore', divide='ignore'):
        pop_sd = np.sqrt(pop_var)
        pop_cv = np.abs(100 * (pop_sd / pop_mean))

    return {
        'gridpts': gridpts,
        'w_par_vol': w_par_vol,
        'pop_points': pop_points,
        'pop_mean': pd.Series(pop_mean, index=par),
        'pop_cov': pd.DataFrame(pop_cov, index=par, columns=par),
        'pop_cor': pd.DataFrame(pop_cor, index=par, columns=par),
        'pop_var': pd.Series(pop_var, index=par),
        'pop_sd': pd.Series(pop_sd, index=par),
        'pop_cv': pd.Series(pop_cv, index=par),
        'pop_median': pd.Series(pop_median, index=par)
    }
