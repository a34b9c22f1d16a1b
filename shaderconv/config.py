"""Generator configuration."""

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from shaderconv.errors import ToolInvocationError
from shaderconv.models import ShaderArgs

# Variant arguments, in the order the variants are exported.
VARIANTS: tuple[ShaderArgs, ...] = (
    ShaderArgs(
        fetch_color_expr="_color",
        header="layout(binding=0) uniform Color { vec4 _color; };",
    ),
    ShaderArgs(
        fetch_color_expr="texture(tex, vUV)",
        header="layout(binding=0) uniform sampler2D tex;",
    ),
)

SHADER_EXTENSIONS = (".vert", ".frag")

ENV_GLSLCC = "SHADERCONV_GLSLCC"
ENV_FXC = "SHADERCONV_FXC"
ENV_FORMATTER = "SHADERCONV_FORMATTER"


@dataclass
class ConverterConfig:
    """Configuration of a generator run.

    Attributes:
        package: Go package name of the generated module
        shader_dir: Directory scanned for .vert and .frag files
        output: Path of the generated module
        glslcc: glslcc executable name or path
        hlsl_compiler: fxc executable name or path
        formatter: Command run on the generated module, the module path is
            appended. Empty to skip formatting.
        flatten_ubos: Ask glslcc to flatten uniform blocks into arrays
        variants: Template arguments of each variant
    """

    package: str
    shader_dir: Path = Path("shaders")
    output: Path = Path("shaders.go")
    glslcc: str = "glslcc"
    hlsl_compiler: str = "fxc"
    formatter: tuple[str, ...] = ("gofmt", "-s", "-w")
    flatten_ubos: bool = False
    variants: tuple[ShaderArgs, ...] = field(default=VARIANTS)

    @classmethod
    def from_env(cls, package: str, shader_dir: str | Path) -> "ConverterConfig":
        """Create a configuration, taking tool overrides from the environment.

        SHADERCONV_GLSLCC and SHADERCONV_FXC replace the compiler executables.
        SHADERCONV_FORMATTER replaces the formatter command (split on
        whitespace); setting it to an empty string disables formatting.
        """
        config = cls(package=package, shader_dir=Path(shader_dir))
        if os.environ.get(ENV_GLSLCC):
            config.glslcc = os.environ[ENV_GLSLCC]
        if os.environ.get(ENV_FXC):
            config.hlsl_compiler = os.environ[ENV_FXC]
        if ENV_FORMATTER in os.environ:
            config.formatter = tuple(os.environ[ENV_FORMATTER].split())
        return config


def resolve_tool(name: str) -> str:
    """Find an executable by name on PATH, or accept a path to one.

    Raises:
        ToolInvocationError: If the tool cannot be found
    """
    path = shutil.which(name)
    if path is None:
        raise ToolInvocationError(f"{name}: executable not found", tool=name)
    return path
