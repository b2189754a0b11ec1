import numpy as np
from numba import jit, prange

def ricker(f0, t, t0=None, factor=1.0):
    # Ricker source time function (second derivative of a Gaussian)
    if t0 is None:
        t0 = 1.2 / f0
    a = np.pi * np.pi * f0 * f0
    source = -factor * (1.0 - 2.0 * a * (t - t0) ** 2) * np.exp(-a * (t - t0) ** 2)
    return source

def dim_plus_2(A):
    # one ghost point of zeros on each side of every axis
    return np.pad(A, 1, mode="constant")

def checkPadding(A):
    if A.ndim != 3:
        raise ValueError(f"ERROR: Expected a 3D field, got {A.ndim} dimensions.")
    if min(A.shape) < 3:
        raise ValueError(f"ERROR: Field of shape {A.shape} has no ghost layer to differentiate.")

class derivatives:
    """Centered O(2) stencils on fields padded with one ghost layer.

    Arrays are ordered (z, y, x). Every operator takes a padded field and
    returns its interior, i.e. a field smaller by one point on each side.
    """

    def __init__(self, dz, dy, dx):
        self.dz = dz
        self.dy = dy
        self.dx = dx

        # Coefficients for derivatives
        self.co_dx = 1. / (2. * dx)
        self.co_dy = 1. / (2. * dy)
        self.co_dz = 1. / (2. * dz)

    # First order centered derivatives
    def d_x(self, A):
        checkPadding(A)
        return self.co_dx * (A[1:-1, 1:-1, 2:] - A[1:-1, 1:-1, :-2])

    def d_y(self, A):
        checkPadding(A)
        return self.co_dy * (A[1:-1, 2:, 1:-1] - A[1:-1, :-2, 1:-1])

    def d_z(self, A):
        checkPadding(A)
        return self.co_dz * (A[2:, 1:-1, 1:-1] - A[:-2, 1:-1, 1:-1])

    # Second order derivatives, first derivative applied twice
    def d_xx(self, A):
        return self.d_x(dim_plus_2(self.d_x(A)))

    def d_yy(self, A):
        return self.d_y(dim_plus_2(self.d_y(A)))

    def d_zz(self, A):
        return self.d_z(dim_plus_2(self.d_z(A)))

    # Mixed derivatives
    def d_xy(self, A):
        return self.d_y(dim_plus_2(self.d_x(A)))

    def d_xz(self, A):
        return self.d_z(dim_plus_2(self.d_x(A)))

    def d_yz(self, A):
        return self.d_z(dim_plus_2(self.d_y(A)))

@jit(nopython=True)
def createCerjanWeights(N_abc, nz_abc, ny_abc, nx_abc):
    # Decay coefficients for each point of the padded model
    weights = np.ones((nz_abc, ny_abc, nx_abc))
    if N_abc == 0:
        return weights

    abs_rate = 0.3 / N_abc
    for iz in range(nz_abc):
        for iy in range(ny_abc):
            for ix in range(nx_abc):
                i = 0
                j = 0
                k = 0
                if ix < N_abc:
                    i = N_abc - ix
                if iy < N_abc:
                    j = N_abc - iy
                if iz < N_abc:
                    k = N_abc - iz
                if ix > nx_abc - 1 - N_abc:
                    i = ix - (nx_abc - 1 - N_abc)
                if iy > ny_abc - 1 - N_abc:
                    j = iy - (ny_abc - 1 - N_abc)
                if iz > nz_abc - 1 - N_abc:
                    k = iz - (nz_abc - 1 - N_abc)
                if i == 0 and j == 0 and k == 0:
                    continue
                rr = abs_rate * abs_rate * (i * i + j * j + k * k)
                weights[iz, iy, ix] = np.exp(-rr)

    return weights

@jit(nopython=True, parallel=True)
def AbsorbingBoundary(f, weights):
    nz_abc, ny_abc, nx_abc = f.shape
    for k in prange(nz_abc):
        for j in range(ny_abc):
            for i in range(nx_abc):
                f[k, j, i] *= weights[k, j, i]

    return f

@jit(nopython=True, parallel=True)
def updateDisplacement(U3, U2, U1, G, dt2rho, nz, ny, nx):
    # U(t) = 2*U(t-1) - U(t-2) + G dt2/rho, interior only
    for k in prange(nz):
        for j in range(ny):
            for i in range(nx):
                U3[k+1, j+1, i+1] = 2.0 * U2[k+1, j+1, i+1] - U1[k+1, j+1, i+1] + G[k, j, i] * dt2rho[k, j, i]

    return U3
