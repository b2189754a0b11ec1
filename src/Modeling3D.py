import numpy as np
import time

from createModel import model
from createSource import createSource
from survey import parameters
from utils3D import AbsorbingBoundary
from utils3D import createCerjanWeights
from utils3D import derivatives
from utils3D import updateDisplacement

class NumericalFaultError(FloatingPointError):
    def __init__(self, step, component):
        self.step = step
        self.component = component
        super().__init__(f"ERROR: Non-finite displacement {component} at time step {step}.")

COMPONENTS = ("ux", "uy", "uz")

class wavefield:
    """3D elastic FDTD solver in displacement formulation.

    Leapfrog O(2,2) time stepping with Cerjan (1985) sponge boundaries.
    Configuration and model errors are raised on construction, before any
    time step. Diagnostics are callables ``f(it, time, ux, uy, uz)`` that
    receive read-only views of the interior every ``step`` time steps.
    """

    def __init__(self, parameters_path, diagnostics=None):
        self.pmt = parameters(parameters_path)
        self.mdl = model(self.pmt)
        self.report = self.mdl.checkDispersionAndStability()
        self.ops = derivatives(self.pmt.dz, self.pmt.dy, self.pmt.dx)
        self.diagnostics = list(diagnostics or [])

        self.createAbsorbingWeights()
        self.createSource()
        self.initializeWavefields()

    def createAbsorbingWeights(self):
        self.weights = createCerjanWeights(self.pmt.N_abc, self.pmt.nz_abc, self.pmt.ny_abc, self.pmt.nx_abc)
        self.weights.flags.writeable = False
        print(f"info: Absorbing boundary created: {self.pmt.N_abc} points, rate {0.3 / max(self.pmt.N_abc, 1):.4f}")

    def createSource(self):
        self.source = createSource(self.pmt, self.mdl, self.ops)

    def initializeWavefields(self):
        # Three snapshots [t, t-1, t-2] of [ux, uy, uz], each with one ghost point per side
        self.u = np.zeros([3, 3, self.pmt.nz_abc, self.pmt.ny_abc, self.pmt.nx_abc])
        self.future = 0     # t, computed in the current step
        self.current = 1    # t-1
        self.past = 2       # t-2

        self.seismogram = np.zeros([3, self.mdl.nt, self.pmt.Nrec])

        self.it = 0
        self.state = "Idle"
        self.stopRequested = False
        print(f"info: Wavefields initialized: {self.pmt.nx}x{self.pmt.ny}x{self.pmt.nz}x{self.mdl.nt}")

    def stressDivergence(self, ux, uy, uz):
        d = self.ops
        # Second-order derivatives
        # Ux
        dux_dxx = d.d_xx(ux)
        dux_dyy = d.d_yy(ux)
        dux_dzz = d.d_zz(ux)
        dux_dxz = d.d_xz(ux)
        dux_dxy = d.d_xy(ux)
        # Uy
        duy_dxx = d.d_xx(uy)
        duy_dyy = d.d_yy(uy)
        duy_dzz = d.d_zz(uy)
        duy_dxy = d.d_xy(uy)
        duy_dyz = d.d_yz(uy)
        # Uz
        duz_dxx = d.d_xx(uz)
        duz_dyy = d.d_yy(uz)
        duz_dzz = d.d_zz(uz)
        duz_dxz = d.d_xz(uz)
        duz_dyz = d.d_yz(uz)

        lam_2mu, lam_mu, mu = self.mdl.lam_2mu, self.mdl.lam_mu, self.mdl.mu
        # RHS of the wave equation, G
        sigmas_ux = lam_2mu * dux_dxx + mu * dux_dyy + mu * dux_dzz + lam_mu * duz_dxz + lam_mu * duy_dxy
        sigmas_uy = mu * duy_dxx + lam_2mu * duy_dyy + mu * duy_dzz + lam_mu * duz_dyz + lam_mu * dux_dxy
        sigmas_uz = mu * duz_dxx + mu * duz_dyy + lam_2mu * duz_dzz + lam_mu * duy_dyz + lam_mu * dux_dxz

        return sigmas_ux, sigmas_uy, sigmas_uz

    def step(self):
        if self.state == "Done":
            raise RuntimeError("ERROR: Simulation already finished.")
        self.state = "Stepping"

        nz, ny, nx = self.pmt.nz, self.pmt.ny, self.pmt.nx
        U3 = self.u[self.future]
        U2 = self.u[self.current]
        U1 = self.u[self.past]

        U3.fill(0)
        G = self.stressDivergence(U2[0], U2[1], U2[2])
        for c in range(3):
            updateDisplacement(U3[c], U2[c], U1[c], G[c], self.mdl.dt2rho, nz, ny, nx)

        # Add source term
        for c, term in enumerate(self.source.term(self.it)):
            if term is not None:
                U3[c, 1:-1, 1:-1, 1:-1] += term

        # Exchange between t-2, t-1 and t and apply ABS
        for c in range(3):
            AbsorbingBoundary(U2[c], self.weights)
            AbsorbingBoundary(U3[c], self.weights)
        self.past, self.current, self.future = self.current, self.future, self.past

        self.it += 1
        self.registerSeismogram()
        self.checkFinite()
        self.display()

        if self.it == self.mdl.nt:
            self.state = "Done"

    def registerSeismogram(self):
        if self.pmt.Nrec == 0:
            return
        U = self.u[self.current]
        self.seismogram[:, self.it - 1, :] = U[:, self.pmt.rz + 1, self.pmt.ry + 1, self.pmt.rx + 1]

    def checkFinite(self):
        if self.pmt.check_every == 0 or self.it % self.pmt.check_every != 0:
            return
        U = self.u[self.current]
        for c in range(3):
            if not np.isfinite(U[c]).all():
                self.state = "Done"
                raise NumericalFaultError(self.it, COMPONENTS[c])

    def display(self):
        if self.pmt.step == 0 or self.it % self.pmt.step != 0:
            return
        t = self.mdl.t[self.it - 1]
        print(f"info: Time step: {self.it} \t {t:.4f} s")
        ux, uy, uz = self.displacement()
        for diagnostic in self.diagnostics:
            diagnostic(self.it, t, ux, uy, uz)

    def displacement(self):
        fields = []
        for c in range(3):
            view = self.u[self.current, c, 1:-1, 1:-1, 1:-1].view()
            view.flags.writeable = False
            fields.append(view)
        return tuple(fields)

    def stop(self):
        self.stopRequested = True

    def SolveWaveEquation(self, nsteps=None):
        start_time = time.time()
        print("info: Solving elastic wave equation")
        last = self.mdl.nt if nsteps is None else min(self.mdl.nt, self.it + nsteps)
        self.stopRequested = False
        while self.it < last:
            if self.stopRequested:
                print(f"info: Stopped at time step {self.it}")
                break
            self.step()

        print(f"info: {self.it} of {self.mdl.nt} time steps completed in {time.time() - start_time:.2f} seconds")
        return self.displacement()
