from shaderconv.config import ConverterConfig
from shaderconv.errors import (
    BytecodeCompileError,
    FileAccessError,
    ReflectionParseError,
    ShaderConvError,
    TemplateError,
    ToolInvocationError,
    UnsupportedTypeError,
)
from shaderconv.generator import Generator, generate
from shaderconv.models import ShaderRecord, ShaderSources
from shaderconv.reflection import parse_reflection

__version__ = "0.1.0"


__all__ = [
    "ConverterConfig",
    "Generator",
    "generate",
    "parse_reflection",
    "ShaderRecord",
    "ShaderSources",
    "ShaderConvError",
    "TemplateError",
    "ToolInvocationError",
    "FileAccessError",
    "ReflectionParseError",
    "UnsupportedTypeError",
    "BytecodeCompileError",
]
