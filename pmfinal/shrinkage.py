import numpy as np
import pandas as pd
from typing import List


def calculate_shrinkage(pop_var: pd.Series, post_var: pd.DataFrame, par: List[str]) -> pd.DataFrame:
    """
    Shrinkage of each random parameter

    The population variance is the variance of the empirical Bayes estimates
    (posterior means) plus the variance of the empirical Bayes distributions.
    Shrinkage is the mean posterior variance (EBD) divided by the population
    variance. Values are not clamped to [0, 1]; a zero population variance
    gives inf or nan.
    """
    var_ebd = post_var[par].to_numpy(dtype=float).mean(axis=0)
    with np.errstate(invalid='ignore', divide='ignore'):
        sh = var_ebd / np.asarray(pop_var, dtype=float)
    return pd.DataFrame({'par': list(par), 'shrinkage': sh})
