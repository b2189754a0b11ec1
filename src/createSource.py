from dataclasses import dataclass

import numpy as np

from utils3D import derivatives
from utils3D import dim_plus_2
from utils3D import ricker

def createSphereKernel(nz, ny, nx, ksrc, jsrc, isrc, radius, inner_radius=0):
    """Source distributed over a sphere with exponential amplitude decay.

    Nodes within ``radius`` of the source point (and farther than
    ``inner_radius`` for a hollow shell) are weighted by exp(-dist**2/2),
    dist in grid nodes. The result carries the ghost layer of the wavefields.
    """
    kk, jj, ii = np.ogrid[0:nz, 0:ny, 0:nx]
    dist2 = (kk - ksrc) ** 2 + (jj - jsrc) ** 2 + (ii - isrc) ** 2

    sphere = dist2 <= radius * radius
    if inner_radius > 0:
        sphere &= dist2 > inner_radius * inner_radius

    dist4pr = np.where(sphere, np.exp(-dist2 / 2.0), 0.0)
    return dim_plus_2(dist4pr)

@dataclass
class SimpleForce:
    """Directional force: one scalar signal per displacement component."""
    kernel: np.ndarray
    force_x: np.ndarray
    force_y: np.ndarray
    force_z: np.ndarray

    def __post_init__(self):
        self.interior = self.kernel[1:-1, 1:-1, 1:-1]
        self.active = [np.any(f != 0) for f in (self.force_x, self.force_y, self.force_z)]

    def term(self, it):
        forces = (self.force_x[it], self.force_y[it], self.force_z[it])
        return tuple(self.interior * f if on else None for f, on in zip(forces, self.active))

@dataclass
class MomentTensor:
    """Moment tensor spread as forces along the gradient of the kernel."""
    kernel: np.ndarray
    signal: np.ndarray
    ops: derivatives
    xx: float = 1.0
    yy: float = 1.0
    zz: float = 1.0
    xy: float = 0.0
    xz: float = 0.0
    yz: float = 0.0

    def __post_init__(self):
        dk_dx = self.ops.d_x(self.kernel)
        dk_dy = self.ops.d_y(self.kernel)
        dk_dz = self.ops.d_z(self.kernel)

        self.pattern_x = self.xx * dk_dx + self.xy * dk_dy + self.xz * dk_dz
        self.pattern_y = self.yy * dk_dy + self.xy * dk_dx + self.yz * dk_dz
        self.pattern_z = self.zz * dk_dz + self.yz * dk_dy + self.xz * dk_dx
        self.patterns = [p if np.any(p != 0) else None for p in (self.pattern_x, self.pattern_y, self.pattern_z)]

    def term(self, it):
        m = self.signal[it]
        return tuple(None if p is None else p * m for p in self.patterns)

def createSource(pmt, mdl, ops):
    source_signal = ricker(pmt.f0, mdl.t, pmt.t0, pmt.factor)
    print(f"info: Ricker source wavelet created: {mdl.nt} samples")

    dist4pr = createSphereKernel(pmt.nz, pmt.ny, pmt.nx, pmt.ksrc, pmt.jsrc, pmt.isrc,
                                 pmt.sphere_radius, pmt.inner_radius)

    dt2rho_src = mdl.dt ** 2 / mdl.rho[pmt.ksrc, pmt.jsrc, pmt.isrc]
    amplitude = source_signal * dt2rho_src / (pmt.dx * pmt.dy * pmt.dz)

    if pmt.source_type == "force":
        angle = np.radians(pmt.angle_force)
        force_x = np.sin(angle) * amplitude
        force_y = np.cos(angle) * amplitude
        if pmt.vertical_force:
            force_z = np.sin(angle) * amplitude
        else:
            force_z = np.zeros_like(amplitude)
        print(f"info: Force source at node ({pmt.ksrc}, {pmt.jsrc}, {pmt.isrc}), angle {pmt.angle_force:.1f} deg")
        return SimpleForce(dist4pr, force_x, force_y, force_z)

    print(f"info: Moment tensor source at node ({pmt.ksrc}, {pmt.jsrc}, {pmt.isrc}): {pmt.moment_tensor}")
    return MomentTensor(dist4pr, amplitude, ops, **pmt.moment_tensor)
