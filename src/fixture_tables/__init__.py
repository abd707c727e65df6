"""fixture-tables: populate typed objects from behavior-driven test tables."""

from fixture_tables.config import MappingConfig, load_config
from fixture_tables.convert import (
    BoolConverter,
    Cell,
    ConverterRegistry,
    EnumConverter,
    FunctionConverter,
    NumberConverter,
    StringConverter,
    ValueConverter,
    coerce,
    convert_value,
    default_converters,
)
from fixture_tables.descriptors import (
    DescriptorRegistry,
    PropertyAccessor,
    TypeDescriptor,
    TypeDescriptorBuilder,
    derive_descriptor,
)
from fixture_tables.errors import (
    BackingStorageError,
    ConversionError,
    EmptyTableError,
    InstantiationError,
    MappingError,
    RegistryFrozenError,
    TableMappingError,
    TableShapeError,
)
from fixture_tables.mapping import (
    TableMapper,
    create_instance,
    create_set,
    get_default_mapper,
    set_default_mapper,
    set_property,
)
from fixture_tables.orientation import Orientation, detect_orientation, is_vertical
from fixture_tables.table import Table, TableRow

__all__ = [
    # Table
    "Table",
    "TableRow",
    # Orientation
    "Orientation",
    "detect_orientation",
    "is_vertical",
    # Mapping
    "TableMapper",
    "create_instance",
    "create_set",
    "set_property",
    "get_default_mapper",
    "set_default_mapper",
    # Conversion
    "Cell",
    "ValueConverter",
    "FunctionConverter",
    "ConverterRegistry",
    "StringConverter",
    "BoolConverter",
    "NumberConverter",
    "EnumConverter",
    "default_converters",
    "convert_value",
    "coerce",
    # Descriptors
    "DescriptorRegistry",
    "PropertyAccessor",
    "TypeDescriptor",
    "TypeDescriptorBuilder",
    "derive_descriptor",
    # Config
    "MappingConfig",
    "load_config",
    # Errors
    "TableMappingError",
    "MappingError",
    "ConversionError",
    "BackingStorageError",
    "EmptyTableError",
    "TableShapeError",
    "InstantiationError",
    "RegistryFrozenError",
]
