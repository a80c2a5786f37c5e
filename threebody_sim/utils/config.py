"""Configuration management: run parameters and initial-condition files."""

import configparser
import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, List, Tuple
import numpy as np
from threebody_sim.exceptions import InvalidConfiguration
from threebody_sim.physics.body import Body
from threebody_sim.physics.force_calculator import GRAVITATIONAL_CONSTANT, FORCE_METHODS
from threebody_sim.physics.integrators import list_integrators

logger = logging.getLogger(__name__)

# INI [simulation] keys -> SimulationConfig fields
_INI_SIMULATION_KEYS = {
    "time_step": "dt",
    "num_steps": "step_count",
    "softening": "softening",
    "gravitational_constant": "G",
    "integrator": "integrator",
    "record_initial": "record_initial",
    "record_interval": "record_interval",
    "force_method": "force_method",
    "workers": "workers",
    "min_separation": "min_separation",
}

_INI_BODY_KEYS = (
    "mass",
    "position_x", "position_y", "position_z",
    "velocity_x", "velocity_y", "velocity_z",
)


@dataclass
class SimulationConfig:
    """Run parameters."""
    # Integration
    dt: float = 86400.0  # 1 day
    step_count: int = 1000
    integrator: str = "verlet"

    # Force law
    softening: float = 0.0
    G: float = GRAVITATIONAL_CONSTANT
    force_method: str = "vectorized"
    workers: int = 1
    min_separation: float = 0.0

    # Recording
    record_initial: bool = True
    record_interval: int = 1

    def validate(self) -> "SimulationConfig":
        """Check every parameter; returns self.

        Raises:
            InvalidConfiguration: On the first invalid parameter
        """
        if not (np.isfinite(self.dt) and self.dt > 0):
            raise InvalidConfiguration(f"Time step must be positive, got {self.dt}")
        if int(self.step_count) != self.step_count or self.step_count < 1:
            raise InvalidConfiguration(f"Step count must be a positive integer, got {self.step_count}")
        if str(self.integrator).lower() not in list_integrators():
            raise InvalidConfiguration(f"Unknown integrator '{self.integrator}'. Available: {list_integrators()}")
        if not (np.isfinite(self.softening) and self.softening >= 0):
            raise InvalidConfiguration(f"Softening length must be non-negative, got {self.softening}")
        if not (np.isfinite(self.G) and self.G > 0):
            raise InvalidConfiguration(f"Gravitational constant must be positive, got {self.G}")
        if self.force_method not in FORCE_METHODS:
            raise InvalidConfiguration(f"Unknown force method '{self.force_method}'. Available: {list(FORCE_METHODS)}")
        if int(self.workers) != self.workers or self.workers < 1:
            raise InvalidConfiguration(f"Worker count must be a positive integer, got {self.workers}")
        if not (np.isfinite(self.min_separation) and self.min_separation >= 0):
            raise InvalidConfiguration(f"Minimum separation must be non-negative, got {self.min_separation}")
        if int(self.record_interval) != self.record_interval or self.record_interval < 1:
            raise InvalidConfiguration(f"Record interval must be a positive integer, got {self.record_interval}")
        return self

    @property
    def expected_records(self) -> int:
        """Number of trajectory records a completed run produces."""
        return self.step_count // self.record_interval + (1 if self.record_initial else 0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimulationConfig":
        """Build from a mapping of field names; unknown keys are rejected."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidConfiguration(f"Unknown simulation parameters: {sorted(unknown)}")
        defaults = cls()
        values = {}
        for key, value in data.items():
            values[key] = _coerce(key, value, type(getattr(defaults, key)))
        return cls(**values)


def load_config(config_path: str) -> Tuple[List[Body], SimulationConfig]:
    """Load initial conditions and run parameters from file.

    Args:
        config_path: Path to config file (.ini, .json or .yaml)

    Returns:
        Tuple of (bodies, config)

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidConfiguration: If the content is unusable
    """
    config_path = Path(config_path)
    suffix = config_path.suffix.lower()

    with open(config_path, 'r') as f:
        text = f.read()

    if suffix == '.ini':
        bodies, config = _parse_ini(text, source=str(config_path))
    elif suffix in ('.json', '.yaml', '.yml'):
        if suffix == '.json':
            try:
                data = json.loads(text)
            except json.JSONDecodeError as e:
                raise InvalidConfiguration(f"{config_path}: {e}") from e
        else:
            data = _yaml_load(text, config_path)
        bodies, config = _parse_mapping(data, source=str(config_path))
    else:
        raise InvalidConfiguration(f"Unsupported config format: {config_path.suffix}. Use .ini, .json or .yaml")

    config.validate()
    logger.debug("Loaded %d bodies from %s", len(bodies), config_path)
    return bodies, config


def save_config(bodies: List[Body], config: SimulationConfig, output_path: str):
    """Save initial conditions and run parameters to file.

    Args:
        bodies: Bodies in index order
        config: Run parameters
        output_path: Output file path (.ini, .json or .yaml)
    """
    output_path = Path(output_path)
    suffix = output_path.suffix.lower()

    if suffix == '.ini':
        parser = configparser.ConfigParser()
        parser["simulation"] = {
            ini_key: str(getattr(config, field_name))
            for ini_key, field_name in _INI_SIMULATION_KEYS.items()
        }
        for index, body in enumerate(bodies, start=1):
            parser[f"Body{index}"] = {
                "mass": repr(float(body.mass)),
                "position_x": repr(float(body.position[0])),
                "position_y": repr(float(body.position[1])),
                "position_z": repr(float(body.position[2])),
                "velocity_x": repr(float(body.velocity[0])),
                "velocity_y": repr(float(body.velocity[1])),
                "velocity_z": repr(float(body.velocity[2])),
            }
        with open(output_path, 'w') as f:
            parser.write(f)
        return

    data = {
        "simulation": asdict(config),
        "bodies": [
            {
                "mass": float(b.mass),
                "position": [float(x) for x in b.position],
                "velocity": [float(v) for v in b.velocity],
            }
            for b in bodies
        ],
    }
    if suffix == '.json':
        with open(output_path, 'w') as f:
            json.dump(data, f, indent=2)
    elif suffix in ('.yaml', '.yml'):
        yaml = _import_yaml()
        with open(output_path, 'w') as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    else:
        raise InvalidConfiguration(f"Unsupported config format: {output_path.suffix}. Use .ini, .json or .yaml")


def _parse_ini(text: str, source: str) -> Tuple[List[Body], SimulationConfig]:
    """Parse the [BodyN] / [simulation] INI layout."""
    parser = configparser.ConfigParser(
        inline_comment_prefixes=('#', ';'),
        comment_prefixes=('#', ';'),
        interpolation=None,
    )
    try:
        parser.read_string(text, source=source)
    except configparser.Error as e:
        raise InvalidConfiguration(f"{source}: {e}") from e

    bodies = []
    settings: Dict[str, Any] = {}
    for section in parser.sections():
        values = parser[section]
        name = section.strip().lower()
        if name.startswith("body"):
            bodies.append(_ini_body(section, values, source))
        elif name == "simulation":
            for key, raw in values.items():
                field_name = _INI_SIMULATION_KEYS.get(key)
                if field_name is None:
                    logger.debug("%s: ignoring unknown key '%s' in [%s]", source, key, section)
                    continue
                settings[field_name] = raw
        else:
            logger.debug("%s: ignoring section [%s]", source, section)

    if not bodies:
        raise InvalidConfiguration(f"{source}: no bodies found in configuration file")
    return bodies, SimulationConfig.from_dict(settings)


def _ini_body(section: str, values, source: str) -> Body:
    for key in values:
        if key not in _INI_BODY_KEYS:
            logger.debug("%s: ignoring unknown key '%s' in [%s]", source, key, section)
    if "mass" not in values:
        raise InvalidConfiguration(f"{source}: [{section}] has no mass")
    numbers = {}
    for key in _INI_BODY_KEYS:
        raw = values.get(key, "0")
        try:
            numbers[key] = float(raw)
        except ValueError:
            raise InvalidConfiguration(f"{source}: [{section}] {key} = {raw!r} is not a number") from None
    return _make_body(
        numbers["mass"],
        (numbers["position_x"], numbers["position_y"], numbers["position_z"]),
        (numbers["velocity_x"], numbers["velocity_y"], numbers["velocity_z"]),
        where=f"{source}: [{section}]",
    )


def _parse_mapping(data: Any, source: str) -> Tuple[List[Body], SimulationConfig]:
    """Parse the {"bodies": [...], "simulation": {...}} layout of JSON/YAML files."""
    if not isinstance(data, dict):
        raise InvalidConfiguration(f"{source}: top level must be a mapping")
    raw_bodies = data.get("bodies") or []
    if not raw_bodies:
        raise InvalidConfiguration(f"{source}: no bodies found in configuration file")

    bodies = []
    for index, entry in enumerate(raw_bodies):
        where = f"{source}: bodies[{index}]"
        if not isinstance(entry, dict) or "mass" not in entry:
            raise InvalidConfiguration(f"{where} must be a mapping with a mass")
        try:
            mass = float(entry["mass"])
            position = tuple(float(x) for x in entry.get("position", (0.0, 0.0, 0.0)))
            velocity = tuple(float(v) for v in entry.get("velocity", (0.0, 0.0, 0.0)))
        except (TypeError, ValueError) as e:
            raise InvalidConfiguration(f"{where}: {e}") from e
        bodies.append(_make_body(mass, position, velocity, where=where))

    return bodies, SimulationConfig.from_dict(data.get("simulation") or {})


def _make_body(mass: float, position, velocity, where: str) -> Body:
    if not (np.isfinite(mass) and mass > 0.0):
        raise InvalidConfiguration(f"{where}: body mass must be positive, got {mass}")
    if len(position) != 3 or len(velocity) != 3:
        raise InvalidConfiguration(f"{where}: position and velocity need 3 components")
    return Body(mass=mass, position=tuple(position), velocity=tuple(velocity))


def _coerce(key: str, value: Any, target: type) -> Any:
    """Convert a raw (often string) value to the field's type."""
    try:
        if target is bool:
            if isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in ("1", "true", "yes", "on"):
                    return True
                if lowered in ("0", "false", "no", "off"):
                    return False
                raise ValueError(f"not a boolean: {value!r}")
            return bool(value)
        if target is int:
            number = float(value)
            if not number.is_integer():
                raise ValueError(f"not an integer: {value!r}")
            return int(number)
        if target is float:
            return float(value)
        return str(value).strip()
    except (TypeError, ValueError) as e:
        raise InvalidConfiguration(f"Invalid value for {key}: {e}") from None


def _import_yaml():
    try:
        import yaml
    except ImportError:
        raise ImportError("YAML support requires PyYAML. Install with: pip install pyyaml")
    return yaml


def _yaml_load(text: str, config_path: Path) -> Any:
    yaml = _import_yaml()
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise InvalidConfiguration(f"{config_path}: {e}") from e
