import copy
from configparser import ConfigParser, NoOptionError, NoSectionError
import json
import os
from typing import Any, Callable, List, Optional, Type, TypeVar, Union

__all__ = [
    "ConfigFieldRange",
    "ConfigurationField",
    "ConfigurationSchema",
    "ConfigValueError",
    "OptionType",
    "default_schema_path",
    "load_default_schema",
]


class ConfigValueError(ValueError):
    """Invalid value (or missing mandatory value) in a configuration file or schema"""


class LowerCaseStr(str):
    """String option that is always stored in lower case"""

    def __new__(cls, val: str):
        return super().__new__(cls, val.lower())


LowerCaseStr.__name__ = "lc-str"


def str_to_bool(val: str) -> bool:
    if isinstance(val, bool):
        return val
    return bool(int(val))


str_to_bool.__name__ = "bool"

OptionType = TypeVar("OptionType", bound=Union[str, int, float, bool, List[int], List[float]])

default_schema_path = os.path.join(os.path.dirname(os.path.realpath(__file__)), "..", "config", "config-format.json")


class ConfigFieldRange:
    """Acceptable values for a field, either a [min, max] interval (each bound optional) or a set of selectables."""

    def __init__(
        self,
        min_value: Optional[OptionType] = None,
        max_value: Optional[OptionType] = None,
        selectables: Optional[List[OptionType]] = None,
    ):
        self.min_value = min_value
        self.max_value = max_value
        self.selectables = selectables

        if selectables is not None and not (min_value is None and max_value is None):
            raise ConfigValueError("You cannot have both a min or a max, and a selectable pool of values")

        if self.min_value is not None and self.max_value is not None and self.min_value > self.max_value:
            raise ConfigValueError(f"Min value {self.min_value} is larger than max {self.max_value}")

    def _make_base_validate(self) -> Optional[Callable[[Any], bool]]:
        if self.selectables is not None:
            return lambda a: a in self.selectables
        if self.min_value is not None and self.max_value is not None:
            return lambda a: self.min_value <= a <= self.max_value
        if self.min_value is not None:
            return lambda a: a >= self.min_value
        if self.max_value is not None:
            return lambda a: a <= self.max_value
        return None

    def make_validate(self) -> Callable[[Any], bool]:
        """Generate a function that checks whether a value (or every entry of a list of values) is in range."""
        base_function = self._make_base_validate()
        if base_function is None:
            return lambda _: True

        def validate(a) -> bool:
            if isinstance(a, list):
                return all(base_function(x) for x in a)
            return base_function(a)

        return validate

    def __str__(self):
        if self.selectables is not None:
            return "{" + ", ".join(str(s) for s in self.selectables) + "}"
        if self.min_value is not None or self.max_value is not None:
            min_str = "-inf" if self.min_value is None else f"{self.min_value}"
            max_str = "inf" if self.max_value is None else f"{self.max_value}"
            return f"[{min_str}, {max_str}]"
        return ""


class ConfigurationField:
    """
    An option that can be set in a configuration file. Has a name, a type, a section and potentially
    a default value and range of possible values. A field can be made to depend on the value of another
    field, in which case it is only read when that other field takes one of the listed values.
    """

    def __init__(
        self,
        field_name: str,
        field_section: str,
        field_default: Optional[OptionType],
        field_type: Type[OptionType],
        is_list: bool,
        valid_range: ConfigFieldRange,
        dependency: Optional[tuple[str, List[OptionType]]],
        description: Optional[str],
    ):
        self.name = field_name
        self.section = field_section
        self.field_default = field_default
        self.type = field_type
        self.is_list = is_list
        self.valid_range = valid_range
        self.validate = self.valid_range.make_validate()
        self.dependency = dependency
        self.description = description

        if field_default is not None and not self.validate(self.field_default):
            raise ConfigValueError(
                f"Default value '{self.field_default}' of field '{self.name}' does not respect "
                f"its valid range: {self.valid_range}"
            )

    def _read_single(self, parser: ConfigParser):
        return self.type(parser.get(self.section, self.name).strip())

    def _read_list(self, parser: ConfigParser):
        raw = parser.get(self.section, self.name).strip()
        if raw.startswith("["):
            try:
                items = json.loads(raw)
            except json.JSONDecodeError as e:
                raise ValueError(f"Could not parse list '{raw}' for option '{self.name}'") from e
            return [self.type(x) for x in items]
        return [self.type(raw)]

    def read(self, parser: ConfigParser) -> OptionType:
        """Read this field from the given parser and verify that it falls within its valid range."""
        try:
            if self.is_list:
                value = self._read_list(parser)
            else:
                value = self._read_single(parser)

        except (NoOptionError, NoSectionError) as e:
            if self.field_default is None:
                raise ConfigValueError(f"Must specify a value for option '{self.name}'") from e

            value = copy.deepcopy(self.field_default)

        except ValueError as e:
            raise ConfigValueError(f"Could not read option '{self.name}': {e}") from e

        if not self.validate(value):
            raise ConfigValueError(
                f"Value '{value}' does not fall in acceptable range for field '{self.name}': {self.valid_range}"
            )

        return value

    def typename(self) -> str:
        if self.is_list:
            return f"List[{self.type.__name__}]"
        return self.type.__name__

    def __str__(self):
        default = "[none]" if self.field_default is None else str(self.field_default)
        return f"{self.name:24s} {self.typename():12s} {default:12s} {str(self.valid_range):24s} {self.description or ''}"


class ConfigurationSchema:
    """A description of the options that can be set in a config file: names, types, default values,
    acceptable ranges and dependencies between options.

    The schema is loaded from a JSON description containing a version string and a list of sections,
    each with a name and a list of fields.
    """

    _classes = {
        "int": int,
        "float": float,
        "bool": str_to_bool,
        "str": LowerCaseStr,
        "lc-str": LowerCaseStr,
    }

    def __init__(self, json_str: str):
        try:
            format_obj = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ValueError("The configuration schema file is badly formatted. It must be a valid JSON file") from e

        self.version = self._get_attribute("version", format_obj, str)
        fields: List[ConfigurationField] = []
        for section in self._get_attribute("sections", format_obj, list):
            section_name = self._get_attribute("name", section, str)
            fields.extend(self._extract_field(f, section_name) for f in self._get_attribute("fields", section, list))

        # Fields with a dependency are read last, so that the value they depend on is known
        self.fields = [f for f in fields if f.dependency is None] + [f for f in fields if f.dependency is not None]

    @staticmethod
    def _get_attribute(name: str, attributes: dict, attribute_type: Type, optional: bool = False):
        if name not in attributes:
            if not optional:
                raise KeyError(f"'{name}' field not found in the dictionary {attributes}")
            return None

        attribute = attributes[name]
        if not isinstance(attribute, attribute_type):
            raise TypeError(f"Attribute '{name}' should be a {attribute_type.__name__}, not '{attribute}'")
        return attribute

    def _extract_field(self, field: dict, section_name: str) -> ConfigurationField:
        field_name = self._get_attribute("name", field, str)
        type_name = self._get_attribute("type", field, str)

        is_list = type_name.startswith("list-")
        if is_list:
            type_name = type_name[5:]
        try:
            field_type = self._classes[type_name]
        except KeyError:
            raise ValueError(f"Field {field_name} has unknown type '{type_name}'") from None

        def convert(value):
            if value is None:
                return None
            if is_list:
                value = value if isinstance(value, list) else [value]
                return [field_type(v) for v in value]
            return field_type(value)

        try:
            field_default = convert(field.get("default"))
            selectables = field.get("selectables")
            valid_range = ConfigFieldRange(
                convert_scalar(field_type, field.get("min")),
                convert_scalar(field_type, field.get("max")),
                None if selectables is None else [field_type(s) for s in selectables],
            )

            dependency = None
            dep = self._get_attribute("dependency", field, dict, optional=True)
            if dep is not None:
                dependency = self._get_attribute("name", dep, str), self._get_attribute("values", dep, list)

        except Exception as e:
            raise ValueError(f"Field {field_name}") from e

        return ConfigurationField(
            field_name,
            section_name,
            field_default,
            field_type,
            is_list,
            valid_range,
            dependency,
            field.get("description"),
        )

    def __str__(self):
        return "\n".join(str(f) for f in self.fields)


def convert_scalar(field_type: Type, value):
    return None if value is None else field_type(value)


def load_default_schema() -> ConfigurationSchema:
    with open(default_schema_path) as f:
        return ConfigurationSchema(f.read())
