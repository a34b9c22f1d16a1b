"""Mapping of reflected type names to portable data types."""

from shaderconv.errors import UnsupportedTypeError
from shaderconv.models import DataType

# Type names as reported by glslcc's reflection output
DATA_TYPES: dict[str, tuple[DataType, int]] = {
    "float": (DataType.FLOAT, 1),
    "float2": (DataType.FLOAT, 2),
    "float3": (DataType.FLOAT, 3),
    "float4": (DataType.FLOAT, 4),
    "int": (DataType.INT, 1),
    "int2": (DataType.INT, 2),
    "int3": (DataType.INT, 3),
    "int4": (DataType.INT, 4),
}


def parse_data_type(type_name: str) -> tuple[DataType, int]:
    """Map a reflected type name to its kind and component count.

    Args:
        type_name: Type name such as "float3" or "int"

    Returns:
        Tuple of (data type, number of components)

    Raises:
        UnsupportedTypeError: If the type is not a 1-4 component float or int
    """
    try:
        return DATA_TYPES[type_name]
    except (KeyError, TypeError):
        raise UnsupportedTypeError(str(type_name)) from None
