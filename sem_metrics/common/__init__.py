from .configuration import Configuration
from .configuration_schema import ConfigurationSchema, ConfigValueError, default_schema_path, load_default_schema
from .element_parallel import for_each_element_chunk, element_chunks
from .readfile import readfile

__all__ = [
    "Configuration",
    "ConfigurationSchema",
    "ConfigValueError",
    "default_schema_path",
    "element_chunks",
    "for_each_element_chunk",
    "load_default_schema",
    "readfile",
]
