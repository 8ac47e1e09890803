from .models import (
    NPAGResult,
    IT2BResult,
    UnsupportedInputKind,
    ABSENT,
    is_absent
)
from .final import FinalCycleSummary, summarize
from .grid import GRID_POINTS, grid_points, cell_volume, aggregate_grid
from .posterior import MAX_POSTERIOR_SUBJECTS, posterior_points, posterior_covariances
from .shrinkage import calculate_shrinkage
from .utils import (
    weighted_quantile,
    weighted_iqr,
    summarize_points,
    cov2cor,
    weighted_cov
)

__version__ = "0.1.0"

__all__ = [
    'NPAGResult',
    'IT2BResult',
    'UnsupportedInputKind',
    'ABSENT',
    'is_absent',
    'FinalCycleSummary',
    'summarize',
    'GRID_POINTS',
    'grid_points',
    'cell_volume',
    'aggregate_grid',
    'MAX_POSTERIOR_SUBJECTS',
    'posterior_points',
    'posterior_covariances',
    'calculate_shrinkage',
    'weighted_quantile',
    'weighted_iqr',
    'summarize_points',
    'cov2cor',
    'weighted_cov',
]
