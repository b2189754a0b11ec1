# -*- coding: utf-8 -*-
import json
import os
import tempfile
import warnings

import numpy as np

from createModel import model
from survey import ConfigurationError
from survey import StabilityWarning
from survey import parameters
from tests import SimulationTestCase

class ParameterTests(SimulationTestCase):

    def test_defaults_are_filled_in(self):
        pmt = parameters(self.smallParameters())
        self.assertEqual((pmt.nz_abc, pmt.ny_abc, pmt.nx_abc), (23, 23, 23))
        self.assertEqual((pmt.ksrc, pmt.jsrc, pmt.isrc), (10, 10, 10))
        self.assertEqual(pmt.N_abc, 3)
        self.assertEqual(pmt.sphere_radius, 2)
        self.assertAlmostEqual(pmt.t0, 1.2 / 15.0)
        self.assertEqual(pmt.source_type, "moment_tensor")
        self.assertEqual(pmt.moment_tensor, {"xx": 1.0, "yy": 1.0, "zz": 1.0, "xy": 0.0, "xz": 0.0, "yz": 0.0})
        self.assertEqual(pmt.Nrec, 0)

    def test_parameters_from_json_file(self):
        with tempfile.TemporaryDirectory() as folder:
            path = os.path.join(folder, "Parameters.json")
            with open(path, "w") as f:
                json.dump(self.smallParameters(nx=31, moment_tensor={"xy": 2.0}), f)
            pmt = parameters(path)
        self.assertEqual(pmt.nx, 31)
        self.assertEqual(pmt.moment_tensor["xy"], 2.0)
        self.assertEqual(pmt.moment_tensor["xx"], 1.0)

    def test_invalid_parameters_are_rejected(self):
        invalid = [
            {"dx": 0.0},
            {"dz": -10.0},
            {"nx": 0},
            {"T": 0.0},
            {"dt": -1e-4},
            {"f0": 0.0},
            {"N_abc": -1},
            {"N_abc": 11},
            {"source_type": "explosion"},
            {"model": "random"},
            {"isrc": 21},
            {"ksrc": -1},
            {"inner_radius": 2},
            {"step": -1},
            {"velocity": 3000.0},
            {"moment_tensor": {"zx": 1.0}},
        ]
        for overrides in invalid:
            with self.subTest(**{k: str(v) for k, v in overrides.items()}):
                with self.assertRaises(ConfigurationError):
                    parameters(self.smallParameters(**overrides))

    def test_integer_parameters_from_json_numbers(self):
        pmt = parameters(self.smallParameters(isrc=5.0, jsrc=6, ksrc=7.0, sphere_radius=3.0, N_abc=4.0))
        for value in (pmt.isrc, pmt.jsrc, pmt.ksrc, pmt.sphere_radius, pmt.N_abc):
            self.assertIs(type(value), int)
        self.assertEqual((pmt.ksrc, pmt.jsrc, pmt.isrc), (7, 6, 5))

        pmt = parameters(self.smallParameters(isrc=5.0, N_abc=4.0, source_type="force"))
        mdl = model(pmt)
        self.assertEqual(mdl.rho[pmt.ksrc, pmt.jsrc, pmt.isrc], 2800.0)

    def test_fractional_indices_are_rejected(self):
        for overrides in ({"isrc": 5.5}, {"ksrc": "middle"}, {"N_abc": 2.5}, {"sphere_radius": 1.5}):
            with self.subTest(**{k: str(v) for k, v in overrides.items()}):
                with self.assertRaises(ConfigurationError):
                    parameters(self.smallParameters(**overrides))

    def test_configuration_error_is_a_value_error(self):
        with self.assertRaises(ValueError):
            parameters(self.smallParameters(dy=0.0))

class ModelTests(SimulationTestCase):

    def test_homogeneous_lame_parameters(self):
        mdl = model(parameters(self.smallParameters(vs=1900.0)))
        self.assertEqual(mdl.vp.shape, (21, 21, 21))
        np.testing.assert_allclose(mdl.mu, 2800.0 * 1900.0 ** 2)
        np.testing.assert_allclose(mdl.lam, 2800.0 * (3300.0 ** 2 - 2 * 1900.0 ** 2))
        np.testing.assert_allclose(mdl.lam_2mu, 2800.0 * 3300.0 ** 2)
        np.testing.assert_allclose(mdl.lam_mu, mdl.lam + mdl.mu)

    def test_shear_velocity_from_ratio(self):
        mdl = model(parameters(self.smallParameters()))
        np.testing.assert_allclose(mdl.vs, 3300.0 / 1.732)

    def test_stable_time_step_and_time_axis(self):
        mdl = model(parameters(self.smallParameters()))
        vs = 3300.0 / 1.732
        dt = 0.1 * 10.0 / np.sqrt(3300.0 ** 2 + 2 * vs ** 2)
        self.assertAlmostEqual(mdl.dt, dt, places=15)
        self.assertEqual(mdl.nt, int(np.floor(0.01 / dt + 0.5)))
        self.assertEqual(len(mdl.t), mdl.nt + 1)
        self.assertEqual(mdl.t[0], 0.0)
        np.testing.assert_allclose(mdl.dt2rho, dt ** 2 / 2800.0)

    def test_explicit_time_step(self):
        mdl = model(parameters(self.smallParameters(dt=1e-4, T=0.0011)))
        self.assertEqual(mdl.dt, 1e-4)
        self.assertEqual(mdl.nt, 11)

    def test_dispersion_report(self):
        mdl = model(parameters(self.smallParameters()))
        with warnings.catch_warnings():
            warnings.simplefilter("error", StabilityWarning)
            summary = mdl.checkDispersionAndStability()
        self.assertLess(summary.cfl, 0.1)
        self.assertAlmostEqual(summary.cfl, 3300.0 * mdl.dt / 10.0)
        self.assertAlmostEqual(summary.min_wavelength, 3300.0 / 1.732 / 15.0)
        self.assertEqual(summary.ppw_x, 12)
        self.assertEqual(summary.nt, mdl.nt)

    def test_large_courant_number_warns(self):
        mdl = model(parameters(self.smallParameters(dt=15.0 / 3300.0)))
        with self.assertWarns(StabilityWarning):
            summary = mdl.checkDispersionAndStability()
        self.assertAlmostEqual(summary.cfl, 1.5)

    def test_coarse_grid_warns(self):
        mdl = model(parameters(self.smallParameters(f0=100.0)))
        with self.assertWarns(StabilityWarning):
            summary = mdl.checkDispersionAndStability()
        self.assertLess(summary.ppw_z, 4)

    def test_invalid_materials_are_rejected(self):
        invalid = [
            {"rho": 0.0},
            {"vs": 0.0},
            {"vs": -100.0},
            {"vs": 3300.0},
            {"vs": 4000.0},
            {"T": 1e-6},
            {"model": "layered"},
            {"model": "file"},
        ]
        for overrides in invalid:
            with self.subTest(**{k: str(v) for k, v in overrides.items()}):
                with self.assertRaises(ConfigurationError):
                    model(parameters(self.smallParameters(**overrides)))

    def test_layered_model(self):
        layers = [{"top": 100.0, "vp": 3000.0, "vs": 1500.0},
                  {"top": 0.0, "vp": 2000.0, "rho": 2000.0}]
        mdl = model(parameters(self.smallParameters(model="layered", layers=layers)))
        self.assertTrue(np.all(mdl.vp[:10] == 2000.0))
        self.assertTrue(np.all(mdl.vp[10:] == 3000.0))
        np.testing.assert_allclose(mdl.vs[:10], 2000.0 / 1.732)
        self.assertTrue(np.all(mdl.vs[10:] == 1500.0))
        self.assertTrue(np.all(mdl.rho[:10] == 2000.0))
        self.assertTrue(np.all(mdl.rho[10:] == 2800.0))
        self.assertAlmostEqual(mdl.dt, 0.1 * 10.0 / np.sqrt(3000.0 ** 2 + 2 * 1500.0 ** 2))

    def test_incomplete_layers_are_rejected(self):
        for layers in ([{"vp": 2000.0}], [{"top": 0.0, "vp": 2000.0}, {"top": 100.0, "vs": 1000.0}]):
            with self.subTest(layers=str(layers)):
                with self.assertRaises(ConfigurationError) as error:
                    model(parameters(self.smallParameters(model="layered", layers=layers)))
                self.assertIn("lacks keys", str(error.exception))

    def test_model_from_binary_files(self):
        nz, ny, nx = 21, 21, 21
        vp = 3000.0 + np.arange(nz * ny * nx, dtype=np.float64).reshape(nz, ny, nx) % 7
        with tempfile.TemporaryDirectory() as folder:
            vpFile = os.path.join(folder, "vp.bin")
            vp.T.astype(np.float32).tofile(vpFile)
            mdl = model(parameters(self.smallParameters(model="file", vpFile=vpFile)))

            badFile = os.path.join(folder, "bad.bin")
            np.zeros(10, dtype=np.float32).tofile(badFile)
            with self.assertRaises(ConfigurationError):
                model(parameters(self.smallParameters(model="file", vpFile=badFile)))

        np.testing.assert_array_equal(mdl.vp, vp)
        np.testing.assert_allclose(mdl.vs, vp / 1.732)
        self.assertTrue(np.all(mdl.rho == 2800.0))
