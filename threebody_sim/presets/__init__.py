"""Preset initial conditions."""

from threebody_sim.exceptions import InvalidConfiguration
from threebody_sim.presets.base import Preset, to_center_of_mass_frame
from threebody_sim.presets.binary import CircularBinary, EarthMoon
from threebody_sim.presets.figure_eight import FigureEight

_PRESETS = {
    'binary': CircularBinary,
    'earth_moon': EarthMoon,
    'figure_eight': FigureEight,
}


def list_presets():
    """Names accepted by get_preset()."""
    return list(_PRESETS)


def get_preset(name: str, **kwargs) -> Preset:
    """Get preset by name."""
    preset_class = _PRESETS.get(name.lower())
    if preset_class is None:
        raise InvalidConfiguration(f"Unknown preset: {name}. Available: {list_presets()}")
    return preset_class(**kwargs)


__all__ = [
    "Preset",
    "CircularBinary",
    "EarthMoon",
    "FigureEight",
    "get_preset",
    "list_presets",
    "to_center_of_mass_frame",
]
