from configparser import ConfigParser
import copy
from typing import Dict, List, Optional, Self

from .configuration_schema import ConfigurationField, ConfigurationSchema, ConfigValueError, OptionType

__all__ = ["Configuration"]


class Configuration:
    """All the config options for a metric computation"""

    sections: Dict[str, List[str]]

    def __init__(self, cfg_content: str, schema: ConfigurationSchema, load_post_config: bool = True):

        self.sections = {}
        self.parser = ConfigParser()
        self.parser.read_string(cfg_content)

        for field in schema.fields:
            try:
                self._get_option(field)
            except ConfigValueError:
                raise
            except Exception as e:
                raise ValueError(f"Error reading option {field.name}") from e

        self.state_version = schema.version

        if load_post_config:
            self._post_config()

    def _post_config(self):
        """Broadcast per-direction lists of length one and check that all of them match the dimension"""
        for name in ["num_solpts", "num_elements", "domain_min", "domain_max", "n_metric"]:
            value = getattr(self, name)
            if len(value) == 1:
                value = value * self.dimension
            if len(value) != self.dimension:
                raise ConfigValueError(
                    f"Option '{name}' has {len(value)} entries, but the problem has {self.dimension} dimensions"
                )
            setattr(self, name, value)

        for lo, hi in zip(self.domain_min, self.domain_max):
            if lo >= hi:
                raise ConfigValueError(f"Domain bounds are inverted or empty: [{lo}, {hi}]")

        # A negative entry means "keep the full polynomial degree" in that direction
        self.n_metric = [n if n >= 0 else p - 1 for n, p in zip(self.n_metric, self.num_solpts)]

    def __deepcopy__(self: Self, memo) -> Self:
        other = copy.copy(self)
        for k, v in vars(self).items():
            if k != "parser":
                setattr(other, k, copy.deepcopy(v, memo))
        return other

    def _get_option(self, field: ConfigurationField) -> Optional[OptionType]:
        if field.dependency is not None:
            if not hasattr(self, field.dependency[0]):
                raise ValueError(f"Cannot validate dependency {field.dependency[0]}. dependency not found")

            if getattr(self, field.dependency[0]) not in field.dependency[1]:
                return None

        value = field.read(self.parser)
        setattr(self, field.name, value)

        self.sections.setdefault(field.section, []).append(field.name)

        return value

    def __str__(self):
        out = "Configuration: \n"
        for section_name, section_options in self.sections.items():
            out += f'\n  {" " + section_name + " ":-^80s}'
            for option in section_options:
                out += f"\n | {option:25s}: {getattr(self, option)}"
            out += "\n"
        return out

    # --- START type hints ---
    dimension: int
    num_solpts: List[int]
    node_type: str
    num_elements: List[int]
    domain_min: List[float]
    domain_max: List[float]
    warp_amplitude: float
    n_metric: List[int]
    num_workers: int
    desired_device: str
    verbose: bool
    # --- END type hints ---
