import numpy as np
import pandas as pd
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Union

from .models import ABSENT, IT2BResult, NPAGResult, UnsupportedInputKind, is_absent
from .grid import aggregate_grid
from .posterior import aggregate_it2b_posterior, aggregate_npag_posterior
from .shrinkage import calculate_shrinkage


@dataclass(frozen=True, eq=False)
class FinalCycleSummary:
    """
    Final cycle population and posterior summary of an NPAG or IT2B run

    Fields that a method does not produce (popPoints, postPoints, postCov,
    postCor, gridpts and popRanFix for IT2B; postPoints, postCov and postCor
    for an NPAG run without posterior densities) hold ABSENT.
    """
    method: str
    pop_mean: pd.Series
    pop_sd: pd.Series
    pop_var: pd.Series
    pop_cv: pd.Series
    pop_cov: pd.DataFrame
    pop_cor: pd.DataFrame
    pop_median: pd.Series
    post_mean: pd.DataFrame
    post_sd: pd.DataFrame
    post_var: pd.DataFrame
    shrinkage: pd.DataFrame
    nsub: int
    ab: np.ndarray
    pop_points: Any = field(default=ABSENT)
    post_points: Any = field(default=ABSENT)
    post_cov: Any = field(default=ABSENT)
    post_cor: Any = field(default=ABSENT)
    gridpts: Any = field(default=ABSENT)
    pop_ran_fix: Any = field(default=ABSENT)

    def has(self, name: str) -> bool:
        """Whether a field was produced for this run"""
        return not is_absent(getattr(self, name))

    def to_dict(self) -> Dict[str, Any]:
        """Produced fields only; absent ones are left out entirely"""
        return {f.name: getattr(self, f.name) for f in fields(self) if self.has(f.name)}


def _summarize_npag(result: NPAGResult) -> FinalCycleSummary:
    grid = aggregate_grid(result.corden, result.ab, result.indpts, result.nvar, result.par)
    posterior = aggregate_npag_posterior(result, grid['w_par_vol'])
    shrinkage = calculate_shrinkage(grid['pop_var'], posterior['post_var'], result.par)

    nranfix = result.nranfix if result.nranfix is not None else len(result.parranfix)
    if nranfix > 0:
        pop_ran_fix = pd.Series(list(result.valranfix), index=list(result.parranfix), dtype=float)
    else:
        pop_ran_fix = ABSENT

    return FinalCycleSummary(
        method='NPAG',
        pop_mean=grid['pop_mean'],
        pop_sd=grid['pop_sd'],
        pop_var=grid['pop_var'],
        pop_cv=grid['pop_cv'],
        pop_cov=grid['pop_cov'],
        pop_cor=grid['pop_cor'],
        pop_median=grid['pop_median'],
        post_mean=posterior['post_mean'],
        post_sd=posterior['post_sd'],
        post_var=posterior['post_var'],
        shrinkage=shrinkage,
        nsub=result.nsub,
        ab=result.ab,
        pop_points=grid['pop_points'],
        post_points=posterior['post_points'],
        post_cov=posterior['post_cov'],
        post_cor=posterior['post_cor'],
        gridpts=grid['gridpts'],
        pop_ran_fix=pop_ran_fix
    )


def _summarize_it2b(result: IT2BResult) -> FinalCycleSummary:
    par = result.par
    final = result.icyctot - 1

    pop_sd = pd.Series(result.isd[final], index=par)
    pop_var = pop_sd ** 2

    lpar = pd.DataFrame(result.lpar, columns=par)
    posterior = aggregate_it2b_posterior(result)
    shrinkage = calculate_shrinkage(pop_var, posterior['post_var'], par)

    return FinalCycleSummary(
        method='IT2B',
        pop_mean=pd.Series(result.imean[final], index=par),
        pop_sd=pop_sd,
        pop_var=pop_var,
        pop_cv=pd.Series(np.abs(result.icv[final]), index=par),
        pop_cov=lpar.cov(),
        pop_cor=lpar.corr(),
        pop_median=pd.Series(result.imed[final], index=par),
        post_mean=posterior['post_mean'],
        post_sd=posterior['post_sd'],
        post_var=posterior['post_var'],
        shrinkage=shrinkage,
        nsub=result.nsub,
        ab=result.ab
    )


def summarize(result: Union[NPAGResult, IT2BResult], verbose: bool = False) -> FinalCycleSummary:
    """
    Summarize the final cycle of an NPAG or IT2B run

    Parameters:
    -----------
    result: Union[NPAGResult, IT2BResult]
        Parsed run output
    verbose: bool
        Print a one-line report when done

    Returns:
    --------
    FinalCycleSummary
        Population moments, posterior moments and shrinkage, tagged with the method
    """
    if isinstance(result, NPAGResult):
        summary = _summarize_npag(result)
    elif isinstance(result, IT2BResult):
        summary = _summarize_it2b(result)
    else:
        raise UnsupportedInputKind(
            f"Expected an NPAGResult or IT2BResult, got {type(result).__name__}"
        )

    if verbose:
        print(f"{summary.method} final cycle summarized: {summary.nsub} subjects, "
              f"{len(summary.pop_mean)} random parameters")

    return summary
