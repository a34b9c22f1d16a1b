"""Shader conversion pipeline.

For every shader in the configured directory and every variant, the shader
template is rendered, translated by glslcc to each target, its reflection
parsed and its HLSL translation compiled to bytecode. The results are folded
into one ``ShaderRecord`` per shader and emitted as a Go module.
"""

import shutil
import subprocess
import tempfile
from pathlib import Path

from loguru import logger

from shaderconv.config import SHADER_EXTENSIONS, ConverterConfig, resolve_tool
from shaderconv.emitter import emit_module
from shaderconv.errors import FileAccessError, ShaderConvError, ToolInvocationError
from shaderconv.glslcc import CrossCompiler
from shaderconv.hlsl import FXCCompiler, HLSLCompiler, compile_hlsl
from shaderconv.models import (
    TARGETS,
    ShaderArgs,
    ShaderRecord,
    ShaderSources,
    ShaderStage,
)
from shaderconv.reflection import parse_reflection
from shaderconv.templating import rendered_shader

VARIANT_NAMES = ("solid", "textured")


def glsl150_from_glsl130(src: str) -> str:
    """Derive GLSL 1.50 from GLSL 1.30.

    OpenGL 3.2 core only accepts GLSL 1.50 but is otherwise compatible with
    GLSL 1.30, so only the version directive changes.
    """
    return src.replace("#version 130", "#version 150", 1)


class Generator:
    """Converts every shader of a directory."""

    def __init__(
        self,
        config: ConverterConfig,
        cross_compiler: CrossCompiler,
        hlsl_compiler: HLSLCompiler,
    ):
        self.config = config
        self.cross_compiler = cross_compiler
        self.hlsl_compiler = hlsl_compiler

    def discover_shaders(self) -> list[Path]:
        """List the .vert and .frag files of the shader directory, sorted."""
        shader_dir = Path(self.config.shader_dir)
        try:
            return sorted(
                p
                for p in shader_dir.iterdir()
                if p.suffix in SHADER_EXTENSIONS and p.is_file()
            )
        except OSError as e:
            raise FileAccessError(
                f"{shader_dir}: cannot list shaders: {e}", shader_dir
            ) from e

    def convert_variant(self, path: Path, args: ShaderArgs) -> ShaderSources:
        """Produce every representation of one variant of a shader."""
        stage = ShaderStage.from_path(path)
        src = ShaderSources()
        scratch_dir = self.cross_compiler.scratch_dir
        with rendered_shader(path, args, scratch_dir) as tmppath:
            for target in TARGETS:
                text, reflect = self.cross_compiler.convert(tmppath, target)
                setattr(src, target.source_field, text)
                if target is TARGETS[0]:
                    # Reflection doesn't depend on the target language.
                    src.reflection = parse_reflection(reflect)
        src.hlsl = compile_hlsl(self.hlsl_compiler, src.hlsl_src, stage)
        src.glsl150 = glsl150_from_glsl130(src.glsl130)
        return src

    def convert_shader(self, path: Path) -> ShaderRecord:
        """Convert both variants of a shader.

        Raises:
            ShaderConvError: Tagged with the shader file and variant that
                failed
        """
        variants = []
        for i, args in enumerate(self.config.variants):
            variant = VARIANT_NAMES[i] if i < len(VARIANT_NAMES) else str(i)
            try:
                variants.append(self.convert_variant(path, args))
            except ShaderConvError as e:
                e.context = f"{path.name} ({variant} variant)"
                raise
        record = ShaderRecord(name=path.name, variants=variants)
        logger.info(
            f"Converted {path.name} "
            f"({len(record.exported_variants)} variant(s) exported)"
        )
        return record

    def run(self) -> list[ShaderRecord]:
        """Convert every shader of the configured directory."""
        shaders = self.discover_shaders()
        logger.info(f"Found {len(shaders)} shaders in {self.config.shader_dir}")
        return [self.convert_shader(path) for path in shaders]


def write_module(config: ConverterConfig, source: str, scratch_dir: Path) -> Path:
    """Format the generated module and move it to its output path.

    The module is only moved into place once formatting succeeded, so a
    failed run never leaves a partial file behind.
    """
    output = Path(config.output)
    tmp_output = Path(scratch_dir) / output.name
    try:
        tmp_output.write_bytes(source.encode("utf-8"))
    except OSError as e:
        raise FileAccessError(f"{tmp_output}: cannot write: {e}", tmp_output) from e
    if config.formatter:
        formatter = resolve_tool(config.formatter[0])
        cmd = [formatter, *config.formatter[1:], str(tmp_output)]
        logger.debug(f"Running {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as e:
            raise ToolInvocationError(
                f"cannot run {formatter}: {e}", tool=formatter
            ) from e
        if result.returncode != 0:
            if result.stderr.strip():
                logger.warning(result.stderr.rstrip())
            raise ToolInvocationError(
                f"{output}: {formatter} exited with status {result.returncode}",
                tool=formatter,
                stderr=result.stderr,
            )
    try:
        shutil.move(str(tmp_output), str(output))
    except OSError as e:
        raise FileAccessError(f"{output}: cannot write: {e}", output) from e
    return output


def generate(config: ConverterConfig) -> Path:
    """Run the whole conversion and write the generated module.

    Args:
        config: Generator configuration

    Returns:
        Path of the written module

    Raises:
        ShaderConvError: On the first failure; nothing is written then
    """
    glslcc = resolve_tool(config.glslcc)
    fxc = resolve_tool(config.hlsl_compiler)
    shader_dir = Path(config.shader_dir).absolute()
    if not shader_dir.is_dir():
        raise FileAccessError(f"{config.shader_dir}: not a directory", shader_dir)

    try:
        tmp = tempfile.TemporaryDirectory(prefix="shader-convert")
    except OSError as e:
        raise FileAccessError(f"cannot create scratch directory: {e}") from e
    with tmp:
        scratch_dir = Path(tmp.name)
        generator = Generator(
            config,
            CrossCompiler(glslcc, shader_dir, scratch_dir, config.flatten_ubos),
            FXCCompiler(fxc, scratch_dir),
        )
        records = generator.run()
        source = emit_module(config.package, records)
        output = write_module(config, source, scratch_dir)
    logger.info(f"Wrote {output}")
    return output
