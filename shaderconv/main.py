"""Command line interface for shaderconv.

This module provides the command that converts a directory of shader
templates into a Go module with GLSL, HLSL and reflection data for every
shader.
"""

import typer
from loguru import logger

from shaderconv.config import ConverterConfig
from shaderconv.errors import ShaderConvError
from shaderconv.generator import generate

app = typer.Typer(
    name="shaderconv",
    help=(
        "Convert GLSL shader templates into GLSL ES, desktop GLSL and HLSL "
        "variants with reflection data, emitted as a Go module."
    ),
    add_completion=False,
)


@app.command()
def convert(
    package: str = typer.Option(
        ..., "--package", help="Go package name of the generated module"
    ),
    shader_dir: str = typer.Option(
        "shaders", "--dir", help="Directory containing .vert and .frag shaders"
    ),
) -> None:
    """Generate shaders.go from the shaders in a directory.

    Requires glslcc and fxc on PATH (or SHADERCONV_GLSLCC and SHADERCONV_FXC).
    The result is formatted with gofmt unless SHADERCONV_FORMATTER is empty.

    Example: shaderconv --package gpu --dir shaders
    """
    config = ConverterConfig.from_env(package, shader_dir)
    try:
        generate(config)
    except ShaderConvError as e:
        logger.error(f"generate: {e}")
        raise typer.Exit(1) from e


def main() -> None:
    app()


if __name__ == "__main__":
    main()
