"""Tests for the Newton/bisection root finder."""
import math

import pytest

from shared.solvers import bisect, find_root, newton


class TestNewton:

    def test_converges_with_analytic_derivative(self):
        root = newton(lambda x: x * x - 4, 1.0, fprime=lambda x: 2 * x)
        assert root == pytest.approx(2.0, abs=1e-6)

    def test_converges_with_numeric_derivative(self):
        root = newton(lambda x: x * x - 4, 1.0)
        assert root == pytest.approx(2.0, abs=1e-6)

    def test_zero_derivative_gives_none(self):
        assert newton(lambda x: x ** 3 - 1, 0.0, fprime=lambda x: 3 * x * x) is None

    def test_no_root_gives_none(self):
        assert newton(lambda x: x * x + 1, 0.5, fprime=lambda x: 2 * x) is None

    def test_iterate_below_lower_bound_aborts(self):
        # From x0=-0.5 the first step jumps to -4.25.
        root = newton(lambda x: x * x - 4, -0.5, fprime=lambda x: 2 * x, lower=-1.0)
        assert root is None


class TestBisect:

    def test_finds_root(self):
        assert bisect(lambda x: x - 3, 0, 10) == pytest.approx(3, abs=1e-6)

    def test_requires_sign_change(self):
        assert bisect(lambda x: x * x + 1, -5, 5) is None

    def test_non_finite_bound_gives_none(self):
        assert bisect(lambda x: math.inf if x < 0 else x - 1, -1, 5) is None


class TestFindRoot:

    def test_falls_back_to_bisection(self):
        root = find_root(lambda x: x ** 3 - 1, 0.0, -1, 5, fprime=lambda x: 3 * x * x)
        assert root == pytest.approx(1.0, abs=1e-6)

    def test_newton_path(self):
        root = find_root(lambda x: math.exp(x) - 2, 0.0, -5, 5)
        assert root == pytest.approx(math.log(2), abs=1e-6)

    def test_unsolvable(self):
        assert find_root(lambda x: 1.0 + x * x, 0.1, -1, 1) is None
