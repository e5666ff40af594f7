"""Numba JIT compiled jet clustering."""

import numba as nb
import numpy as np

__all__ = ["antikt", "pt", "pseudorapidity"]

# Rapidity assigned to particles which travel along the beam axis
MAX_RAPIDITY = 1e5


@nb.njit(cache=True)
def _rapidity(p: nb.float64[:]) -> nb.float64:
    """Rapidity of a four-momentum (px, py, pz, E)."""
    ep, em = p[3] + p[2], p[3] - p[2]
    if em <= 0.0 or ep <= 0.0:
        return MAX_RAPIDITY if p[2] > 0 else -MAX_RAPIDITY
    return 0.5 * np.log(ep / em)


@nb.njit(cache=True)
def _delta_r2(
    y1: nb.float64, phi1: nb.float64, y2: nb.float64, phi2: nb.float64
) -> nb.float64:
    """Squared distance in the rapidity-azimuth plane."""
    dphi = abs(phi1 - phi2)
    if dphi > np.pi:
        dphi = 2.0 * np.pi - dphi
    return (y1 - y2) ** 2 + dphi**2


@nb.njit(cache=True)
def antikt(momenta: nb.float64[:, :], radius: nb.float64 = 0.4) -> nb.float64[:, :]:
    """Cluster particles into jets with the anti-kt algorithm.

    Uses the E-scheme recombination (four-momenta are summed) and the
    rapidity-azimuth distance between pseudojets. Particles with no transverse
    momentum are ignored.

    Parameters
    ----------
    momenta : np.ndarray
        (N, 4) Particle four-momenta (px, py, pz, E)
    radius : float, default 0.4
        Jet radius parameter

    Returns
    -------
    np.ndarray
        (J, 4) Jet four-momenta, in the order they were found
    """
    n = momenta.shape[0]
    pseudo = momenta.copy()
    active = np.zeros(n, dtype=np.bool_)
    kt2_inv = np.zeros(n, dtype=np.float64)
    rap = np.zeros(n, dtype=np.float64)
    phi = np.zeros(n, dtype=np.float64)
    for i in range(n):
        kt2 = pseudo[i, 0] ** 2 + pseudo[i, 1] ** 2
        if kt2 > 0.0:
            active[i] = True
            kt2_inv[i] = 1.0 / kt2
            rap[i] = _rapidity(pseudo[i])
            phi[i] = np.arctan2(pseudo[i, 1], pseudo[i, 0]) % (2.0 * np.pi)

    jets = np.empty((n, 4), dtype=np.float64)
    num_jets = 0
    r2 = radius * radius
    while active.any():
        # Find the smallest of all beam and pairwise distances
        d_min, i_min, j_min = np.inf, -1, -1
        for i in range(n):
            if not active[i]:
                continue
            if kt2_inv[i] < d_min:
                d_min, i_min, j_min = kt2_inv[i], i, -1
            for j in range(i + 1, n):
                if not active[j]:
                    continue
                d_ij = min(kt2_inv[i], kt2_inv[j])
                d_ij *= _delta_r2(rap[i], phi[i], rap[j], phi[j]) / r2
                if d_ij < d_min:
                    d_min, i_min, j_min = d_ij, i, j

        if j_min < 0:
            # The pseudojet is closest to the beam: it is a final jet
            jets[num_jets] = pseudo[i_min]
            num_jets += 1
            active[i_min] = False
        else:
            # Merge the two pseudojets into the first one
            pseudo[i_min] += pseudo[j_min]
            active[j_min] = False
            kt2 = pseudo[i_min, 0] ** 2 + pseudo[i_min, 1] ** 2
            if kt2 > 0.0:
                kt2_inv[i_min] = 1.0 / kt2
                rap[i_min] = _rapidity(pseudo[i_min])
                phi[i_min] = np.arctan2(pseudo[i_min, 1], pseudo[i_min, 0]) % (
                    2.0 * np.pi
                )
            else:
                active[i_min] = False

    return jets[:num_jets]


def pt(momenta):
    """Transverse momentum of a set of four-momenta.

    Parameters
    ----------
    momenta : np.ndarray
        (N, 4) Four-momenta (px, py, pz, E)

    Returns
    -------
    np.ndarray
        (N) Transverse momenta
    """
    return np.hypot(momenta[:, 0], momenta[:, 1])


def pseudorapidity(momenta):
    """Pseudorapidity of a set of four-momenta.

    Parameters
    ----------
    momenta : np.ndarray
        (N, 4) Four-momenta (px, py, pz, E)

    Returns
    -------
    np.ndarray
        (N) Pseudorapidities (infinite along the beam axis)
    """
    p = np.linalg.norm(momenta[:, :3], axis=1)
    pz = momenta[:, 2]
    with np.errstate(divide="ignore", invalid="ignore"):
        eta = 0.5 * np.log((p + pz) / (p - pz))

    return np.where(p == np.abs(pz), np.copysign(np.inf, pz), eta)
