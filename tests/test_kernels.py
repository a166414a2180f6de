import numpy as np
import pytest

from biosensors.core.regression.kernels import (
    KernelType,
    gaussian_kernel,
    get_kernel,
    triweight_kernel,
)

SCALE = 2.0 / np.sqrt(2.0 * np.pi)


def test_gaussian_kernel_values():
    w = gaussian_kernel(np.array([0.0, 1.0, 2.0]), 1.0)
    np.testing.assert_allclose(w, SCALE * np.exp(-0.5 * np.array([0.0, 1.0, 4.0])))


def test_gaussian_kernel_scales_with_bandwidth():
    assert float(gaussian_kernel(2.0, 2.0)) == pytest.approx(float(gaussian_kernel(1.0, 1.0)))


def test_gaussian_kernel_flat_for_large_bandwidth():
    w = gaussian_kernel(np.array([0.0, 5.0, 50.0]), 1e8)
    np.testing.assert_allclose(w, SCALE, rtol=1e-12)


def test_triweight_kernel_values():
    w = triweight_kernel(np.array([0.0, 0.5, 1.0, 1.5]), 1.0)
    np.testing.assert_allclose(w, [35 / 16, 35 / 16 * 0.75 ** 3, 0.0, 0.0])


def test_triweight_kernel_zero_outside_support():
    w = triweight_kernel(np.array([2.0, 10.0]), 1.5)
    np.testing.assert_array_equal(w, 0.0)


@pytest.mark.parametrize("kernel", [gaussian_kernel, triweight_kernel])
@pytest.mark.parametrize("bandwidth", [0.0, -1.0])
def test_kernels_reject_non_positive_bandwidth(kernel, bandwidth):
    with pytest.raises(ValueError):
        kernel(np.array([0.1]), bandwidth)


def test_get_kernel():
    assert get_kernel("gaussian") is gaussian_kernel
    assert get_kernel(KernelType.TRIWEIGHT) is triweight_kernel
    with pytest.raises(KeyError):
        get_kernel("epanechnikov")
