import numpy as np
import pandas as pd
from dataclasses import dataclass, field
from typing import List, Optional


class UnsupportedInputKind(TypeError):
    """Raised when summarize() receives something other than an NPAG or IT2B result"""


class Absent:
    """Marker for summary fields that were not produced for a run"""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "ABSENT"


ABSENT = Absent()


def is_absent(value) -> bool:
    return value is ABSENT


def _as_matrix(values, name: str, ncol: Optional[int] = None) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.ndim == 1:
        # a single column vector is only ambiguous when ncol == 1
        arr = arr.reshape(-1, 1) if ncol == 1 else arr.reshape(1, -1)
    if arr.ndim != 2:
        raise ValueError(f"{name} must be 2-dimensional, got shape {arr.shape}")
    if ncol is not None and arr.shape[1] != ncol:
        raise ValueError(f"{name} must have {ncol} columns, got {arr.shape[1]}")
    return arr


def _check_subjects(sdata: pd.DataFrame) -> pd.DataFrame:
    if not isinstance(sdata, pd.DataFrame):
        sdata = pd.DataFrame({'id': list(sdata)})
    if 'id' not in sdata.columns:
        raise ValueError("sdata must contain an 'id' column")
    return sdata


def _check_subject_rows(sdata: pd.DataFrame, **tables):
    """Per-subject tables must have one row (or slab) per sdata subject"""
    nsub = len(sdata)
    for name, table in tables.items():
        if table.shape[0] != nsub:
            raise ValueError(f"{name} has {table.shape[0]} subjects, sdata has {nsub}")


@dataclass(frozen=True, eq=False)
class NPAGResult:
    """
    Parsed output of an NPAG run

    Parameters:
    -----------
    nvar: int
        Number of random parameters
    par: List[str]
        Random parameter names
    ab: np.ndarray
        nvar x 2 matrix of lower/upper parameter boundaries
    indpts: int
        Grid density index chosen for the run
    corden: np.ndarray
        Final cycle support points, nvar parameter columns plus one density column
    sdata: pd.DataFrame
        Subject table with one row per subject and an 'id' column
    bmean, bsd: np.ndarray
        nsub x nvar posterior means and SDs
    nsub: int
        Number of subjects
    postden: Optional[np.ndarray]
        subject x posterior point x (nvar + 1) posterior densities, NaN-padded,
        last slot is the point probability
    """
    nvar: int
    par: List[str]
    ab: np.ndarray
    indpts: int
    corden: np.ndarray
    sdata: pd.DataFrame
    bmean: np.ndarray
    bsd: np.ndarray
    nsub: int
    postden: Optional[np.ndarray] = None
    parranfix: List[str] = field(default_factory=list)
    valranfix: List[float] = field(default_factory=list)
    nranfix: Optional[int] = None

    def __post_init__(self):
        if len(self.par) != self.nvar:
            raise ValueError(f"nvar ({self.nvar}) != number of parameter names ({len(self.par)})")
        object.__setattr__(self, 'par', list(self.par))
        object.__setattr__(self, 'ab', _as_matrix(self.ab, 'ab', 2))
        object.__setattr__(self, 'corden', _as_matrix(self.corden, 'corden', self.nvar + 1))
        object.__setattr__(self, 'bmean', _as_matrix(self.bmean, 'bmean', self.nvar))
        object.__setattr__(self, 'bsd', _as_matrix(self.bsd, 'bsd', self.nvar))
        object.__setattr__(self, 'sdata', _check_subjects(self.sdata))

        if self.ab.shape[0] != self.nvar:
            raise ValueError(f"ab must have {self.nvar} rows, got {self.ab.shape[0]}")
        _check_subject_rows(self.sdata, bmean=self.bmean, bsd=self.bsd)

        if self.postden is not None:
            postden = np.asarray(self.postden, dtype=float)
            if postden.ndim != 3 or postden.shape[2] != self.nvar + 1:
                raise ValueError(
                    f"postden must have shape (nsub, points, {self.nvar + 1}), got {postden.shape}"
                )
            _check_subject_rows(self.sdata, postden=postden)
            object.__setattr__(self, 'postden', postden)

        if len(self.parranfix) != len(self.valranfix):
            raise ValueError("parranfix and valranfix must have the same length")


@dataclass(frozen=True, eq=False)
class IT2BResult:
    """
    Parsed output of an IT2B run

    imean, isd, imed and icv hold one row per cycle; icyctot is the
    1-based number of the final cycle. lpar and lsd are the per-subject
    log-parameter estimates and their SDs.
    """
    nvar: int
    par: List[str]
    ab: np.ndarray
    imean: np.ndarray
    isd: np.ndarray
    imed: np.ndarray
    icv: np.ndarray
    icyctot: int
    lpar: np.ndarray
    lsd: np.ndarray
    sdata: pd.DataFrame
    nsub: int

    def __post_init__(self):
        if len(self.par) != self.nvar:
            raise ValueError(f"nvar ({self.nvar}) != number of parameter names ({len(self.par)})")
        object.__setattr__(self, 'par', list(self.par))
        object.__setattr__(self, 'ab', _as_matrix(self.ab, 'ab', 2))
        for name in ('imean', 'isd', 'imed', 'icv', 'lpar', 'lsd'):
            object.__setattr__(self, name, _as_matrix(getattr(self, name), name, self.nvar))
        object.__setattr__(self, 'sdata', _check_subjects(self.sdata))
        _check_subject_rows(self.sdata, lpar=self.lpar, lsd=self.lsd)

        ncycles = self.imean.shape[0]
        if not 1 <= self.icyctot <= ncycles:
            raise ValueError(f"icyctot ({self.icyctot}) outside of 1..{ncycles}")
