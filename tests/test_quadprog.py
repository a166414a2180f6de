import numpy as np
import pytest

from biosensors.core.regression.quadprog import (
    projection_problem,
    quadratic_weights,
    slsqp_solver,
)
from biosensors.exceptions import InvalidGridError, QPFailure


def test_quadratic_weights_on_three_point_grid():
    c, C = quadratic_weights(np.array([0.0, 0.5, 1.0]))
    half = np.array([0.25, 0.5, 0.25])
    b0 = np.array([0.25, 0.5, 0.0])
    np.testing.assert_allclose(c, [0.1875, 0.375, 0.0625])
    np.testing.assert_allclose(C, 0.05 * np.outer(half, half) + 0.5 * np.outer(b0, b0))


def test_quadratic_weights_symmetric_psd():
    c, C = quadratic_weights(np.linspace(0, 1, 21))
    assert c.shape == (21,)
    np.testing.assert_allclose(C, C.T)
    assert np.linalg.eigvalsh(C).min() > -1e-12


def test_quadratic_weights_need_two_points():
    with pytest.raises(InvalidGridError):
        quadratic_weights(np.array([0.0]))


def test_projection_problem_shapes_and_feasible_start():
    grid = np.linspace(0, 1, 6)
    qd = np.array([1.0, 0.6, 0.2, -0.2, -0.6, -1.0])
    problem = projection_problem(grid, 0.5, qd, qdmin=1e-3, smoothness=1.5)

    assert problem.D.shape == (7, 7)
    assert problem.d.shape == (7,)
    assert problem.V.shape == (6 + 5 + 5, 7)
    assert problem.v.shape == (16,)
    assert np.all(problem.V.dot(problem.x0) <= problem.v + 1e-12)
    # the unconstrained fit is the unconstrained minimizer
    np.testing.assert_allclose(problem.d, -problem.D.dot(np.concatenate([[0.5], qd])))


def test_slsqp_solver_with_active_constraint():
    x = slsqp_solver(np.eye(2), np.array([-1.0, -1.0]), np.array([[1.0, 0.0]]), np.array([0.5]))
    np.testing.assert_allclose(x, [0.5, 1.0], atol=1e-6)


def test_slsqp_solver_infeasible():
    with pytest.raises(QPFailure):
        slsqp_solver(
            np.eye(1),
            np.zeros(1),
            np.array([[1.0], [-1.0]]),
            np.array([-1.0, -1.0]),
        )
