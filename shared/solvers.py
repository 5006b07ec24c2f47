"""
Scalar root finding.

Pure functions with no I/O or state.  Newton-Raphson is tried first from an
initial guess; when it stalls or its derivative vanishes, the
search falls back to bisection over a bracketing interval.
"""

import logging
import math
from typing import Callable, Optional

from shared.constants import (
    IRR_BISECTION_ITERATIONS,
    IRR_NEWTON_ITERATIONS,
    IRR_TOLERANCE,
)

logger = logging.getLogger(__name__)

ScalarFn = Callable[[float], float]


def _numeric_derivative(f: ScalarFn) -> ScalarFn:
    """Central-difference derivative of *f*."""
    def fprime(x: float) -> float:
        h = 1e-6 * max(1.0, abs(x))
        return (f(x + h) - f(x - h)) / (2 * h)
    return fprime


def newton(
    f: ScalarFn,
    x0: float,
    fprime: Optional[ScalarFn] = None,
    lower: float = -math.inf,
    tol: float = IRR_TOLERANCE,
    max_iter: int = IRR_NEWTON_ITERATIONS,
) -> Optional[float]:
    """Newton-Raphson iteration.

    Returns the first iterate with ``|f(x)| < tol``, or None when the
    derivative is zero/non-finite, an iterate is non-finite or falls to
    *lower* or below, or *max_iter* iterations pass without converging.
    """
    if fprime is None:
        fprime = _numeric_derivative(f)

    x = x0
    for _ in range(max_iter):
        fx = f(x)
        if abs(fx) < tol:
            return x
        dfx = fprime(x)
        if not math.isfinite(dfx) or dfx == 0:
            return None
        nxt = x - fx / dfx
        if not math.isfinite(nxt) or nxt <= lower:
            return None
        x = nxt
    return None


def bisect(
    f: ScalarFn,
    low: float,
    high: float,
    tol: float = IRR_TOLERANCE,
    max_iter: int = IRR_BISECTION_ITERATIONS,
) -> Optional[float]:
    """Bisection over ``[low, high]``.

    Requires a sign change of *f* across the bounds (and finite values at
    both); otherwise returns None.  After *max_iter* halvings the interval
    midpoint is returned.
    """
    f_low = f(low)
    f_high = f(high)
    if not math.isfinite(f_low) or not math.isfinite(f_high) or f_low * f_high > 0:
        return None

    for _ in range(max_iter):
        mid = (low + high) / 2
        f_mid = f(mid)
        if abs(f_mid) < tol:
            return mid
        if f_low * f_mid < 0:
            high = mid
        else:
            low = mid
            f_low = f_mid

    return (low + high) / 2


def find_root(
    f: ScalarFn,
    x0: float,
    low: float,
    high: float,
    fprime: Optional[ScalarFn] = None,
    tol: float = IRR_TOLERANCE,
    newton_iter: int = IRR_NEWTON_ITERATIONS,
    bisect_iter: int = IRR_BISECTION_ITERATIONS,
) -> Optional[float]:
    """Newton-Raphson with a bisection fallback.

    Args:
        f: Scalar function whose root is sought.
        x0: Initial Newton guess.
        low: Lower bracket; Newton iterates at or below it abort Newton.
        high: Upper bracket for the bisection fallback.
        fprime: Analytic derivative of *f*.  A central difference is used
                when omitted.
        tol: Convergence threshold on ``|f(x)|``.
        newton_iter: Newton iteration cap.
        bisect_iter: Bisection iteration cap.

    Returns:
        The root, or None if Newton fails and ``[low, high]`` does not
        bracket a sign change.
    """
    root = newton(f, x0, fprime=fprime, lower=low, tol=tol, max_iter=newton_iter)
    if root is not None:
        return root

    logger.debug("Newton did not converge from x0=%s; bisecting [%s, %s]", x0, low, high)
    return bisect(f, low, high, tol=tol, max_iter=bisect_iter)
