# -*- coding: utf-8 -*-
from unittest import TestCase

class SimulationTestCase(TestCase):
    """Small, fast configurations shared by the test modules."""

    @staticmethod
    def smallParameters(**overrides):
        parameters = {
            "nx": 21, "ny": 21, "nz": 21,
            "dx": 10.0, "dy": 10.0, "dz": 10.0,
            "T": 0.01,
            "vp": 3300.0,
            "vpvs_ratio": 1.732,
            "rho": 2800.0,
            "f0": 15.0,
            "step": 0,
            "check_every": 1,
        }
        parameters.update(overrides)
        return parameters
