import pandas as pd
import json
import numpy as np

class ConfigurationError(ValueError):
    pass

class StabilityWarning(UserWarning):
    pass

DEFAULT_PARAMETERS = {
    # Grid
    "nx": 101, "ny": 101, "nz": 101,
    "dx": 10.0, "dy": 10.0, "dz": 10.0,

    # Time stepping
    "T": 0.20,
    "dt": None,
    "cfl_factor": 0.1,

    # Material model
    "model": "homogeneous",
    "vp": 3300.0,
    "vs": None,
    "vpvs_ratio": 1.732,
    "rho": 2800.0,
    "layers": None,
    "vpFile": None,
    "vsFile": None,
    "rhoFile": None,

    # Source
    "source_type": "moment_tensor",
    "f0": 15.0,
    "t0": None,
    "factor": 1e10,
    "angle_force": 90.0,
    "vertical_force": False,
    "moment_tensor": None,
    "isrc": None, "jsrc": None, "ksrc": None,
    "sphere_radius": None,
    "inner_radius": 0,

    # Absorbing boundary
    "N_abc": None,

    # Output
    "step": 40,
    "check_every": 1,
    "rec_file": None,
    "plot": False,
}

DEFAULT_MOMENT_TENSOR = {"xx": 1.0, "yy": 1.0, "zz": 1.0, "xy": 0.0, "xz": 0.0, "yz": 0.0}

SOURCE_TYPES = ["force", "moment_tensor"]
MODEL_TYPES = ["homogeneous", "layered", "file"]

def asInteger(name, value):
    # grid indices and point counts; None keeps the derived default
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"ERROR: Parameter {name} must be an integer, got {value!r}.")
    if not number.is_integer():
        raise ConfigurationError(f"ERROR: Parameter {name} must be an integer, got {value!r}.")
    return int(number)

class parameters:
    """Simulation parameters read from a JSON file (or a plain dict)."""

    def __init__(self, parameters_path):
        self.parameters_path = parameters_path
        self.readParameters()
        self.checkParameters()
        self.readAcquisitionGeometry()

    def readParameters(self):
        if isinstance(self.parameters_path, dict):
            user = dict(self.parameters_path)
        else:
            with open(self.parameters_path) as f:
                user = json.load(f)
            print(f"info: Imported: {self.parameters_path}")

        unknown = sorted(set(user) - set(DEFAULT_PARAMETERS))
        if unknown:
            raise ConfigurationError(f"ERROR: Unknown parameters: {', '.join(unknown)}")

        self.parameters = dict(DEFAULT_PARAMETERS)
        self.parameters.update(user)

        # Number of points in each direction
        self.nx = int(self.parameters["nx"])
        self.ny = int(self.parameters["ny"])
        self.nz = int(self.parameters["nz"])

        # Discretization parameters
        self.dx = float(self.parameters["dx"])
        self.dy = float(self.parameters["dy"])
        self.dz = float(self.parameters["dz"])

        # +2 stands for a single ghost point on each side
        self.nx_abc = self.nx + 2
        self.ny_abc = self.ny + 2
        self.nz_abc = self.nz + 2

        # Model size
        self.L = self.nx * self.dx
        self.W = self.ny * self.dy
        self.D = self.nz * self.dz
        self.T = float(self.parameters["T"])
        self.dt = self.parameters["dt"]
        self.cfl_factor = float(self.parameters["cfl_factor"])

        # Material model
        self.model = self.parameters["model"]
        self.vp = self.parameters["vp"]
        self.vs = self.parameters["vs"]
        self.vpvs_ratio = self.parameters["vpvs_ratio"]
        self.rho = self.parameters["rho"]
        self.layers = self.parameters["layers"]
        self.vpFile = self.parameters["vpFile"]
        self.vsFile = self.parameters["vsFile"]
        self.rhoFile = self.parameters["rhoFile"]

        # Source parameters
        self.source_type = self.parameters["source_type"]
        self.f0 = float(self.parameters["f0"])
        self.t0 = self.parameters["t0"]
        if self.t0 is None and self.f0 > 0:
            self.t0 = 1.20 / self.f0
        self.factor = float(self.parameters["factor"])
        self.angle_force = float(self.parameters["angle_force"])
        self.vertical_force = bool(self.parameters["vertical_force"])

        tensor = self.parameters["moment_tensor"] or {}
        unknown = sorted(set(tensor) - set(DEFAULT_MOMENT_TENSOR))
        if unknown:
            raise ConfigurationError(f"ERROR: Unknown moment tensor components: {', '.join(unknown)}")
        self.moment_tensor = dict(DEFAULT_MOMENT_TENSOR)
        self.moment_tensor.update({k: float(v) for k, v in tensor.items()})

        # Source location (grid nodes, interior indexing)
        self.isrc = asInteger("isrc", self.parameters["isrc"])
        self.jsrc = asInteger("jsrc", self.parameters["jsrc"])
        self.ksrc = asInteger("ksrc", self.parameters["ksrc"])
        if self.isrc is None:
            self.isrc = self.nx // 2
        if self.jsrc is None:
            self.jsrc = self.ny // 2
        if self.ksrc is None:
            self.ksrc = self.nz // 2

        # Radius of the spherical source [grid nodes]
        self.sphere_radius = asInteger("sphere_radius", self.parameters["sphere_radius"])
        if self.sphere_radius is None:
            self.sphere_radius = int(np.ceil(self.nx / (10 * 2)))
        self.inner_radius = asInteger("inner_radius", self.parameters["inner_radius"]) or 0

        # Thickness of the absorbing layer
        self.N_abc = asInteger("N_abc", self.parameters["N_abc"])
        if self.N_abc is None:
            self.N_abc = min(int(np.floor(0.15 * self.nx)), int(np.floor(0.15 * self.nz)))

        # Display cadence and fault checks
        self.step = int(self.parameters["step"] or 0)
        self.check_every = int(self.parameters["check_every"] or 0)
        self.rec_file = self.parameters["rec_file"]
        self.plot = bool(self.parameters["plot"])

    def checkParameters(self):
        for name, n in (("nx", self.nx), ("ny", self.ny), ("nz", self.nz)):
            if n < 1:
                raise ConfigurationError(f"ERROR: Grid dimension {name} must be positive, got {n}.")

        for name, d in (("dx", self.dx), ("dy", self.dy), ("dz", self.dz)):
            if not d > 0:
                raise ConfigurationError(f"ERROR: Grid spacing {name} must be positive, got {d}.")

        if not self.T > 0:
            raise ConfigurationError(f"ERROR: Total time T must be positive, got {self.T}.")
        if self.dt is not None and not self.dt > 0:
            raise ConfigurationError(f"ERROR: Time step dt must be positive, got {self.dt}.")
        if not self.f0 > 0:
            raise ConfigurationError(f"ERROR: Dominant frequency f0 must be positive, got {self.f0}.")

        if self.N_abc < 0:
            raise ConfigurationError(f"ERROR: Absorbing margin must be non-negative, got {self.N_abc}.")
        for name, n in (("nx", self.nx), ("ny", self.ny), ("nz", self.nz)):
            if 2 * self.N_abc > n:
                raise ConfigurationError(f"ERROR: Absorbing margin {self.N_abc} is larger than half the domain along {name}={n}.")

        if self.source_type not in SOURCE_TYPES:
            raise ConfigurationError(f"ERROR: Unknown source type '{self.source_type}'. Choose 'force' or 'moment_tensor'.")
        if self.model not in MODEL_TYPES:
            raise ConfigurationError(f"ERROR: Unknown model '{self.model}'. Choose 'homogeneous', 'layered' or 'file'.")

        for name, idx, n in (("isrc", self.isrc, self.nx), ("jsrc", self.jsrc, self.ny), ("ksrc", self.ksrc, self.nz)):
            if not 0 <= idx < n:
                raise ConfigurationError(f"ERROR: Source index {name}={idx} outside of the grid [0, {n}).")

        if self.sphere_radius < 0:
            raise ConfigurationError(f"ERROR: Source radius must be non-negative, got {self.sphere_radius}.")
        if self.inner_radius and self.inner_radius >= self.sphere_radius:
            raise ConfigurationError(f"ERROR: Inner radius {self.inner_radius} must be smaller than the source radius {self.sphere_radius}.")

        if self.step < 0 or self.check_every < 0:
            raise ConfigurationError("ERROR: Display cadence and check interval must be non-negative.")

    def readAcquisitionGeometry(self):
        self.Nrec = 0
        self.rec_x = np.zeros(0)
        self.rec_y = np.zeros(0)
        self.rec_z = np.zeros(0)
        self.rx = self.ry = self.rz = np.zeros(0, dtype=np.int32)
        if self.rec_file is None:
            return

        # Read receiver coordinates from CSV file
        receiverTable = pd.read_csv(self.rec_file)
        print(f"info: Imported: {self.rec_file}")

        missing = [c for c in ("coordx", "coordy", "coordz") if c not in receiverTable.columns]
        if missing:
            raise ConfigurationError(f"ERROR: Receiver file {self.rec_file} lacks columns: {', '.join(missing)}")

        self.rec_x = receiverTable['coordx'].to_numpy()
        self.rec_y = receiverTable['coordy'].to_numpy()
        self.rec_z = receiverTable['coordz'].to_numpy()
        self.Nrec = len(self.rec_x)

        # convert acquisition geometry coordinates to grid points
        self.rx = np.floor(self.rec_x / self.dx).astype(np.int32)
        self.ry = np.floor(self.rec_y / self.dy).astype(np.int32)
        self.rz = np.floor(self.rec_z / self.dz).astype(np.int32)

        outside = ((self.rx < 0) | (self.rx >= self.nx) | (self.ry < 0) | (self.ry >= self.ny) |
                   (self.rz < 0) | (self.rz >= self.nz))
        if np.any(outside):
            raise ConfigurationError(f"ERROR: {np.count_nonzero(outside)} receivers fall outside of the model.")
