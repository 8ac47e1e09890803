import numpy as np
import pandas as pd
import warnings
from typing import Dict, List, Optional

from .models import ABSENT
from .utils import weighted_cov

# per-subject posterior covariance is only computed for the first subjects
MAX_POSTERIOR_SUBJECTS = 100


def subject_table(ids, values: np.ndarray, par: List[str]) -> pd.DataFrame:
    """One row per subject keyed by id, one column per parameter"""
    table = pd.DataFrame(np.asarray(values, dtype=float), columns=par)
    table.insert(0, 'id', list(ids))
    return table


def posterior_points(postden: Optional[np.ndarray], par: List[str],
                     ids, w_par_vol: float):
    """
    Long table of NPAG posterior points

    Each row holds the subject id, the active posterior point number, the
    parameter values and the point probability rescaled by the cell volume.
    Unused point slots (missing probability) are dropped. Returns ABSENT
    when the run carries no posterior densities.
    """
    if postden is None:
        return ABSENT

    postden = np.asarray(postden, dtype=float)
    nsub, npoints, ncol = postden.shape
    if nsub == 0 or npoints == 0:
        return ABSENT

    subj, point = np.meshgrid(np.arange(1, nsub + 1), np.arange(1, npoints + 1), indexing='ij')
    points = pd.DataFrame(postden.reshape(nsub * npoints, ncol), columns=list(par) + ['prob'])
    points.insert(0, 'point', point.flatten())
    points.insert(0, 'id', subj.flatten())

    points = points[~points['prob'].isna()].reset_index(drop=True)
    points['prob'] = points['prob'] * w_par_vol

    ids = np.asarray(list(ids), dtype=object)
    points['id'] = ids[points['id'].to_numpy() - 1]
    return points


def posterior_covariances(post_points: pd.DataFrame, par: List[str], ids,
                          nsub: int, max_subjects: int = MAX_POSTERIOR_SUBJECTS) -> Dict:
    """
    ML-weighted covariance and correlation of each subject's posterior points

    Parameters:
    -----------
    post_points: pd.DataFrame
        Output of posterior_points
    par: List[str]
        Parameter names
    ids: sequence
        Subject ids in subject order
    nsub: int
        Number of subjects
    max_subjects: int
        Only the first max_subjects subjects are processed

    Returns:
    --------
    Dict with 'post_cov' and 'post_cor', each mapping subject id to a
    parameter x parameter DataFrame
    """
    ids = list(pd.unique(pd.Series(list(ids))))
    n = min(nsub, max_subjects, len(ids))

    post_cov = {}
    post_cor = {}
    for subject_id in ids[:n]:
        subject_points = post_points[post_points['id'] == subject_id]
        if len(subject_points) == 0:
            warnings.warn(f"No posterior points for subject {subject_id}")

        ret = weighted_cov(subject_points[par].to_numpy(dtype=float),
                           subject_points['prob'].to_numpy(dtype=float))
        post_cov[subject_id] = pd.DataFrame(ret['cov'], index=par, columns=par)
        post_cor[subject_id] = pd.DataFrame(ret['cor'], index=par, columns=par)

    return {'post_cov': post_cov, 'post_cor': post_cor}


def aggregate_npag_posterior(result, w_par_vol: float) -> Dict:
    """Posterior statistics of an NPAG run"""
    ids = result.sdata['id'].tolist()
    post_points = posterior_points(result.postden, result.par, ids, w_par_vol)

    if post_points is ABSENT:
        post_cov = ABSENT
        post_cor = ABSENT
    else:
        covs = posterior_covariances(post_points, result.par, ids, result.nsub)
        post_cov = covs['post_cov']
        post_cor = covs['post_cor']

    return {
        'post_points': post_points,
        'post_mean': subject_table(ids, result.bmean, result.par),
        'post_sd': subject_table(ids, result.bsd, result.par),
        'post_var': subject_table(ids, result.bsd ** 2, result.par),
        'post_cov': post_cov,
        'post_cor': post_cor
    }


def aggregate_it2b_posterior(result) -> Dict:
    """Posterior point estimates of an IT2B run, taken from the log-parameter fits"""
    ids = result.sdata['id'].tolist()
    return {
        'post_mean': subject_table(ids, result.lpar, result.par),
        'post_sd': subject_table(ids, result.lsd, result.par),
        'post_var': subject_table(ids, result.lsd ** 2, result.par)
    }
