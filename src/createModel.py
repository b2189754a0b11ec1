import warnings
from collections import namedtuple

import numpy as np

from survey import ConfigurationError
from survey import StabilityWarning

# Velocities at or below this value are treated as fluid (no shear)
VS_FLOOR = 0.1
# Fewer points per shortest wavelength than this is flagged as under-resolved
MIN_POINTS_PER_WAVELENGTH = 4

report = namedtuple("report", ["cfl", "dt", "nt", "min_wavelength", "ppw_x", "ppw_y", "ppw_z"])

class model:
    """Elastic model: material fields, Lame parameters and the time axis."""

    def __init__(self, parameters):
        self.pmt = parameters
        self.createMaterialModel()
        self.checkMaterialModel()
        self.createLameParameters()
        self.createTimeAxis()

    def ImportModel(self, filename):
        data = np.fromfile(filename, dtype=np.float32)
        if data.size != self.pmt.nx * self.pmt.ny * self.pmt.nz:
            raise ConfigurationError(f"ERROR: {filename} holds {data.size} values, expected {self.pmt.nx}x{self.pmt.ny}x{self.pmt.nz}.")
        print(f"info: Imported: {filename}")
        return data.reshape(self.pmt.nx, self.pmt.ny, self.pmt.nz).T.astype(np.float64)

    def createMaterialModel(self):
        shape = (self.pmt.nz, self.pmt.ny, self.pmt.nx)
        if self.pmt.model == "homogeneous":
            self.createHomogeneousModel(shape)
        elif self.pmt.model == "layered":
            self.createLayeredModel(shape)
        else:
            self.createModelFromFiles(shape)
        print(f"info: {self.pmt.model.capitalize()} model created: {self.pmt.nz}x{self.pmt.ny}x{self.pmt.nx}")

    def shearVelocity(self, vp, vs):
        if vs is None:
            return vp / self.pmt.vpvs_ratio
        return vs

    def createHomogeneousModel(self, shape):
        self.vp = self.pmt.vp * np.ones(shape)                # velocity of compressional waves, [m/s]
        self.vs = self.shearVelocity(self.vp, self.pmt.vs)    # velocity of shear waves, [m/s]
        self.vs = self.vs * np.ones(shape)
        self.rho = self.pmt.rho * np.ones(shape)              # density, [kg/m3]

    def createLayeredModel(self, shape):
        if not self.pmt.layers:
            raise ConfigurationError("ERROR: Layered model requires a non-empty 'layers' list.")

        self.vp = np.zeros(shape)
        self.vs = np.zeros(shape)
        self.rho = np.zeros(shape)

        for n, layer in enumerate(self.pmt.layers):
            missing = [key for key in ("top", "vp") if key not in layer]
            if missing:
                raise ConfigurationError(f"ERROR: Layer {n} lacks keys: {', '.join(missing)}")

        depth = np.arange(self.pmt.nz) * self.pmt.dz
        layers = sorted(self.pmt.layers, key=lambda layer: layer["top"])
        for n, layer in enumerate(layers):
            if n == 0:
                idx = np.ones(self.pmt.nz, dtype=bool)
            else:
                idx = depth >= layer["top"]
            vp = layer["vp"]
            self.vp[idx] = vp
            self.vs[idx] = self.shearVelocity(vp, layer.get("vs"))
            self.rho[idx] = layer.get("rho", self.pmt.rho)

    def createModelFromFiles(self, shape):
        if self.pmt.vpFile is None:
            raise ConfigurationError("ERROR: Model type 'file' requires 'vpFile'.")
        self.vp = self.ImportModel(self.pmt.vpFile)
        if self.pmt.vsFile is None:
            self.vs = self.vp / self.pmt.vpvs_ratio
        else:
            self.vs = self.ImportModel(self.pmt.vsFile)
        if self.pmt.rhoFile is None:
            self.rho = self.pmt.rho * np.ones(shape)
        else:
            self.rho = self.ImportModel(self.pmt.rhoFile)

    def checkMaterialModel(self):
        if np.any(self.rho <= 0):
            raise ConfigurationError(f"ERROR: Density must be positive everywhere, minimum is {np.min(self.rho):.2f} kg/m3.")
        if np.any(self.vs < 0):
            raise ConfigurationError("ERROR: Shear velocity must be non-negative.")
        if np.any(self.vp <= self.vs):
            raise ConfigurationError("ERROR: Compressional velocity must exceed shear velocity everywhere.")
        if np.max(self.vs) <= VS_FLOOR:
            raise ConfigurationError("ERROR: Shear velocity is at or below the floor everywhere, shortest wavelength is undefined.")

    def createLameParameters(self):
        self.lam = self.rho * (self.vp ** 2 - 2 * self.vs ** 2)     # first Lame parameter
        self.mu = self.rho * self.vs ** 2                           # shear modulus, [N/m2]

        # Some pre-computed constants
        self.lam_2mu = self.lam + 2 * self.mu
        self.lam_mu = self.lam + self.mu

    def stableTimeStep(self):
        vp_max = np.max(self.vp)
        vs_max = np.max(self.vs)
        return self.pmt.cfl_factor * min(self.pmt.dx, self.pmt.dz) / np.sqrt(vp_max ** 2 + 2 * vs_max ** 2)

    def createTimeAxis(self):
        if self.pmt.dt is None:
            self.dt = self.stableTimeStep()
        else:
            self.dt = float(self.pmt.dt)

        # round half away from zero
        self.nt = int(np.floor(self.pmt.T / self.dt + 0.5))
        if self.nt < 1:
            raise ConfigurationError(f"ERROR: Total time {self.pmt.T} s is shorter than one time step {self.dt:.3e} s.")

        self.t = np.arange(self.nt + 1) * self.dt
        self.dt2rho = (self.dt ** 2) / self.rho

    def checkDispersionAndStability(self):
        dmin = min(self.pmt.dx, self.pmt.dz)
        cfl = np.max(self.vp) * self.dt / dmin             # Courant number, should be < 1
        min_wavelength = np.min(self.vs[self.vs > VS_FLOOR]) / self.pmt.f0

        summary = report(cfl=float(cfl),
                         dt=float(self.dt),
                         nt=self.nt,
                         min_wavelength=float(min_wavelength),
                         ppw_x=int(np.floor(min_wavelength / self.pmt.dx)),
                         ppw_y=int(np.floor(min_wavelength / self.pmt.dy)),
                         ppw_z=int(np.floor(min_wavelength / self.pmt.dz)))

        print("info: 3D elastic FDTD wave propagation in isotropic medium")
        print(f"info: Model: {self.pmt.nz} x {self.pmt.ny} x {self.pmt.nx} grid nz x ny x nx")
        print(f"info: Spacing: {self.pmt.dz:.1e} x {self.pmt.dy:.1e} x {self.pmt.dx:.1e} [m] dz x dy x dx")
        print(f"info: vp: {np.min(self.vp):.1e}...{np.max(self.vp):.1e} [m/s]")
        print(f"info: vs: {np.min(self.vs):.1e}...{np.max(self.vs):.1e} [m/s]")
        print(f"info: rho: {np.min(self.rho):.1e}...{np.max(self.rho):.1e} [kg/m3]")
        print(f"info: Time: {self.pmt.T:.1e} [sec] total, {summary.dt:.3e} [sec] dt, {summary.nt} time steps")
        print(f"info: Source: {self.pmt.f0:.1e} [Hz] dominant frequency, {self.pmt.t0:.3f} [sec] index time")
        print(f"info: CFL number: {summary.cfl:.3f}")
        print(f"info: Shortest wavelength: {summary.min_wavelength:.2f} [m]")
        print(f"info: Points-per-wavelength OX, OY, OZ: {summary.ppw_x}, {summary.ppw_y}, {summary.ppw_z}")

        if summary.cfl >= 1:
            self.warn(f"CFL number {summary.cfl:.3f} >= 1, time stepping will be unstable.")
        if min(summary.ppw_x, summary.ppw_y, summary.ppw_z) < MIN_POINTS_PER_WAVELENGTH:
            self.warn(f"Less than {MIN_POINTS_PER_WAVELENGTH} points per shortest wavelength, wavefield will be under-resolved.")

        return summary

    def warn(self, message):
        print(f"WARNING: {message}")
        warnings.warn(message, StabilityWarning, stacklevel=3)
