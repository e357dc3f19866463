import numpy as np
import pytest

from survgrad.explanations.reference import (
    mean_reference, replicate_reference, resolve_reference, zero_reference,
)


def test_mean_reference_per_modality(rng):
    X = np.arange(12.0).reshape(4, 3)
    img = rng.normal(size=(4, 2, 3, 3))
    ref_tab, ref_img = mean_reference([X, img])
    assert ref_tab.shape == (1, 3) and ref_img.shape == (1, 2, 3, 3)
    np.testing.assert_allclose(ref_tab[0], X.mean(axis=0))
    np.testing.assert_allclose(ref_img[0], img.mean(axis=0))


def test_mean_reference_without_feature_axis():
    (ref,) = mean_reference([np.arange(4.0)])
    assert ref.shape == (1, 1)
    assert ref[0, 0] == 1.5


def test_resolve_reference_copies_user_input():
    X = np.zeros((4, 3))
    x_ref = np.array([1.0, 2.0, 3.0])
    (ref,) = resolve_reference([X], x_ref, n_instances=2)
    assert ref.shape == (1, 3)
    ref[0, 0] = 99.0
    assert x_ref[0] == 1.0


def test_resolve_reference_one_row_per_instance():
    X = np.zeros((4, 3))
    (ref,) = resolve_reference([X], np.ones((2, 3)), n_instances=2)
    assert ref.shape == (2, 3)


def test_resolve_reference_default_is_mean():
    X = np.arange(12.0).reshape(4, 3)
    (ref,) = resolve_reference([X], None, n_instances=3)
    np.testing.assert_allclose(ref, X.mean(axis=0, keepdims=True))


@pytest.mark.parametrize("x_ref", [np.ones(4), np.ones((3, 3)), [np.ones(3), np.ones(3)]])
def test_resolve_reference_rejects_mismatch(x_ref):
    X = np.zeros((4, 3))
    with pytest.raises(ValueError, match="x_ref"):
        resolve_reference([X], x_ref, n_instances=2)


def test_plain_list_reference_hints_at_asarray():
    X = np.zeros((4, 3))
    with pytest.raises(ValueError, match="np.asarray"):
        resolve_reference([X], [0.0, 0.0, 0.0], n_instances=2)
    (ref,) = resolve_reference([X], np.asarray([0.0, 0.0, 0.0]), n_instances=2)
    assert ref.shape == (1, 3)


def test_replicate_reference_is_instance_major():
    (rep,) = replicate_reference([np.array([[0.0], [1.0]])], n_instances=2, n_grid=3)
    assert rep[:, 0].tolist() == [0, 0, 0, 1, 1, 1]

    (rep,) = replicate_reference([np.array([[7.0, 8.0]])], n_instances=2, n_grid=3)
    assert rep.shape == (6, 2)
    assert (rep == [7.0, 8.0]).all()


def test_zero_reference_shapes(rng):
    refs = zero_reference([np.ones((3, 4)), rng.normal(size=(3, 2, 2))])
    assert [r.shape for r in refs] == [(1, 4), (1, 2, 2)]
    assert all((r == 0).all() for r in refs)
