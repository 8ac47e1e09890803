#!/usr/bin/env python3
"""
Tests for the IT2B final cycle summary and input dispatch
"""

import numpy as np
import pandas as pd
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pmfinal import IT2BResult, UnsupportedInputKind, summarize, ABSENT


def make_it2b(icyctot=10, ncycles=12):
    cycles = np.arange(1, ncycles + 1, dtype=float)
    imean = np.column_stack([cycles, 10 * cycles])
    isd = np.column_stack([0.05 * cycles, 0.5 * cycles])
    imed = imean - 0.25
    icv = -100 * isd / imean

    lpar = np.array([[0.1, 2.3], [0.4, 2.1], [-0.2, 2.6], [0.3, 2.2]])
    lsd = np.array([[0.5, 1.0], [0.5, 2.0], [1.0, 1.0], [0.0, 2.0]])

    return IT2BResult(
        nvar=2,
        par=['KE', 'V'],
        ab=np.array([[0.0, 5.0], [1.0, 100.0]]),
        imean=imean,
        isd=isd,
        imed=imed,
        icv=icv,
        icyctot=icyctot,
        lpar=lpar,
        lsd=lsd,
        sdata=pd.DataFrame({'id': [101, 102, 103, 104]}),
        nsub=4
    )


def test_final_cycle_lookup():
    result = make_it2b(icyctot=10)
    final = summarize(result)

    assert final.method == 'IT2B'
    # cycle 10 is row 9
    assert final.pop_mean.tolist() == result.imean[9].tolist()
    assert final.pop_median.tolist() == result.imed[9].tolist()
    assert final.pop_sd.tolist() == result.isd[9].tolist()
    assert final.pop_var.tolist() == (result.isd[9] ** 2).tolist()
    assert np.all(final.pop_cv.to_numpy() >= 0), "CV is reported as an absolute value"
    assert np.allclose(final.pop_cv.to_numpy(), np.abs(result.icv[9]))


def test_population_covariance_from_subjects():
    result = make_it2b()
    final = summarize(result)

    assert np.allclose(final.pop_cov.to_numpy(), np.cov(result.lpar, rowvar=False))
    assert np.allclose(final.pop_cor.to_numpy(), np.corrcoef(result.lpar, rowvar=False))
    assert list(final.pop_cor.columns) == ['KE', 'V']


def test_posterior_point_estimates():
    result = make_it2b()
    final = summarize(result)

    assert final.post_mean['id'].tolist() == [101, 102, 103, 104]
    assert np.array_equal(final.post_mean[['KE', 'V']].to_numpy(), result.lpar)
    assert np.array_equal(final.post_sd[['KE', 'V']].to_numpy(), result.lsd)
    assert np.array_equal(final.post_var[['KE', 'V']].to_numpy(), result.lsd ** 2)


def test_shrinkage():
    result = make_it2b()
    final = summarize(result)

    var_ebd = (result.lsd ** 2).mean(axis=0)
    expected = var_ebd / result.isd[9] ** 2
    assert np.allclose(final.shrinkage['shrinkage'].to_numpy(), expected)
    # shrinkage is reported as is, even above 1
    assert final.shrinkage['shrinkage'].max() > 1


def test_npag_only_fields_absent():
    final = summarize(make_it2b())

    for name in ['pop_points', 'post_points', 'post_cov', 'post_cor', 'gridpts', 'pop_ran_fix']:
        assert getattr(final, name) is ABSENT, f"{name} should be absent for IT2B"
        assert not final.has(name)
        assert name not in final.to_dict()

    assert final.nsub == 4
    assert final.ab.shape == (2, 2)


def test_final_cycle_out_of_range():
    try:
        make_it2b(icyctot=13, ncycles=12)
    except ValueError:
        pass
    else:
        raise AssertionError("icyctot beyond the recorded cycles should be rejected")


def test_subject_rows_must_match_sdata():
    result = make_it2b()
    try:
        IT2BResult(
            nvar=2, par=['KE', 'V'], ab=result.ab,
            imean=result.imean, isd=result.isd, imed=result.imed, icv=result.icv,
            icyctot=10, lpar=result.lpar, lsd=result.lsd[:3],
            sdata=result.sdata, nsub=4
        )
    except ValueError as e:
        assert "lsd" in str(e)
    else:
        raise AssertionError("lsd rows must match the number of subjects")


def test_unsupported_input():
    for bad in [None, {'nvar': 2}, pd.DataFrame({'CL': [1.0]})]:
        try:
            summarize(bad)
        except UnsupportedInputKind as e:
            assert isinstance(e, TypeError)
        else:
            raise AssertionError(f"{type(bad).__name__} input should be rejected")


if __name__ == "__main__":
    test_final_cycle_lookup()
    test_population_covariance_from_subjects()
    test_posterior_point_estimates()
    test_shrinkage()
    test_npag_only_fields_absent()
    test_final_cycle_out_of_range()
    test_subject_rows_must_match_sdata()
    test_unsupported_input()
    print("All tests passed!")
