"""Numba JIT compiled track fitting primitives in the transverse plane."""

import numba as nb
import numpy as np

__all__ = ["circle_fit_by_taubin", "line_fit", "circle_circle_intersection"]


@nb.njit(cache=True)
def circle_fit_by_taubin(
    points: nb.float64[:, :], max_iter: nb.int64 = 99
) -> (nb.float64, nb.float64, nb.float64):
    """Fit a circle to a set of points in the transverse (x, y) plane.

    Uses the Taubin algebraic fit: the fit parameters are given by the root of
    a characteristic polynomial, found with Newton's method starting from 0.

    Parameters
    ----------
    points : np.ndarray
        (N, 2+) Point coordinates. Only the first two columns are used.
    max_iter : int, default 99
        Maximum number of Newton iterations

    Returns
    -------
    float
        Radius of the circle
    float
        x coordinate of the circle center
    float
        y coordinate of the circle center

    Notes
    -----
    Returns NaN values if the points are degenerate (e.g. aligned).
    """
    n = points.shape[0]
    mean_x = np.mean(points[:, 0])
    mean_y = np.mean(points[:, 1])

    # Compute the moments of the centered points
    mxx, myy, mxy, mxz, myz, mzz = 0.0, 0.0, 0.0, 0.0, 0.0, 0.0
    for i in range(n):
        xi = points[i, 0] - mean_x
        yi = points[i, 1] - mean_y
        zi = xi * xi + yi * yi
        mxy += xi * yi
        mxx += xi * xi
        myy += yi * yi
        mxz += xi * zi
        myz += yi * zi
        mzz += zi * zi

    mxx /= n
    myy /= n
    mxy /= n
    mxz /= n
    myz /= n
    mzz /= n

    # Coefficients of the characteristic polynomial
    mz = mxx + myy
    cov_xy = mxx * myy - mxy * mxy
    var_z = mzz - mz * mz
    a3 = 4.0 * mz
    a2 = -3.0 * mz * mz - mzz
    a1 = var_z * mz + 4.0 * cov_xy * mz - mxz * mxz - myz * myz
    a0 = mxz * (mxz * myy - myz * mxy) + myz * (myz * mxx - mxz * mxy) - var_z * cov_xy
    a22 = a2 + a2
    a33 = a3 + a3 + a3

    # Newton's method starting at x = 0
    x, y = 0.0, a0
    for _ in range(max_iter):
        dy = a1 + x * (a22 + a33 * x)
        if dy == 0.0:
            break
        x_new = x - y / dy
        if x_new == x or not np.isfinite(x_new):
            break
        y_new = a0 + x_new * (a1 + x_new * (a2 + x_new * a3))
        if abs(y_new) >= abs(y):
            break
        x, y = x_new, y_new

    # Circle parameters
    det = x * x - x * mz + cov_xy
    if det == 0.0:
        return np.nan, np.nan, np.nan

    x_center = (mxz * (myy - x) - myz * mxy) / det / 2.0
    y_center = (myz * (mxx - x) - mxz * mxy) / det / 2.0
    radius = np.sqrt(x_center * x_center + y_center * y_center + mz)

    return radius, x_center + mean_x, y_center + mean_y


@nb.njit(cache=True)
def line_fit(points: nb.float64[:, :]) -> (nb.float64, nb.float64):
    """Least-squares fit of z as a linear function of the transverse radius.

    Parameters
    ----------
    points : np.ndarray
        (N, 3) Point coordinates

    Returns
    -------
    float
        Slope A of the line z = A * r + B
    float
        Intercept B of the line z = A * r + B
    """
    n = points.shape[0]
    sum_r, sum_z, sum_r2, sum_rz = 0.0, 0.0, 0.0, 0.0
    for i in range(n):
        r = np.sqrt(points[i, 0] ** 2 + points[i, 1] ** 2)
        z = points[i, 2]
        sum_r += r
        sum_z += z
        sum_r2 += r * r
        sum_rz += r * z

    denom = n * sum_r2 - sum_r * sum_r
    if denom == 0.0:
        return np.nan, np.nan

    slope = (n * sum_rz - sum_r * sum_z) / denom
    intercept = (sum_r2 * sum_z - sum_r * sum_rz) / denom

    return slope, intercept


@nb.njit(cache=True)
def circle_circle_intersection(
    r1: nb.float64, r2: nb.float64, x2: nb.float64, y2: nb.float64
) -> (nb.float64, nb.float64, nb.float64, nb.float64):
    """Intersections of a circle centered at the origin with another circle.

    Parameters
    ----------
    r1 : float
        Radius of the circle centered at the origin
    r2 : float
        Radius of the second circle
    x2 : float
        x coordinate of the center of the second circle
    y2 : float
        y coordinate of the center of the second circle

    Returns
    -------
    float
        x coordinate of the first ("plus") solution
    float
        y coordinate of the first ("plus") solution
    float
        x coordinate of the second ("minus") solution
    float
        y coordinate of the second ("minus") solution

    Notes
    -----
    All four values are NaN if the circles do not intersect.
    """
    d = r1 * r1 - r2 * r2 + x2 * x2 + y2 * y2

    # Centers on the x axis: solve for x first, then y
    if y2 == 0.0:
        if x2 == 0.0:
            return np.nan, np.nan, np.nan, np.nan
        x = d / (2.0 * x2)
        disc = r1 * r1 - x * x
        if disc < 0.0:
            return np.nan, np.nan, np.nan, np.nan
        y = np.sqrt(disc)
        return x, y, x, -y

    a = 1.0 + (x2 * x2) / (y2 * y2)
    b = -d * x2 / (y2 * y2)
    c = d * d / (4.0 * y2 * y2) - r1 * r1
    disc = b * b - 4.0 * a * c
    if disc < 0.0:
        return np.nan, np.nan, np.nan, np.nan

    x_plus = (-b + np.sqrt(disc)) / (2.0 * a)
    x_minus = (-b - np.sqrt(disc)) / (2.0 * a)
    y_plus = -(2.0 * x2 * x_plus - d) / (2.0 * y2)
    y_minus = -(2.0 * x2 * x_minus - d) / (2.0 * y2)

    return x_plus, y_plus, x_minus, y_minus
