"""Compilation of HLSL sources to Direct3D bytecode."""

import os
import subprocess
from pathlib import Path
from typing import Protocol

from loguru import logger

from shaderconv.errors import (
    BytecodeCompileError,
    FileAccessError,
    ToolInvocationError,
)
from shaderconv.models import ShaderStage

# Shader model 4.0 restricted to Direct3D 9.1 hardware, then unrestricted 4.0.
FEATURE_LEVELS: tuple[str, ...] = ("_4_0_level_9_1", "_4_0")


class HLSLCompiler(Protocol):
    """Interface for compiling HLSL text to bytecode."""

    def __call__(self, source: str, entry: str, profile: str) -> bytes:
        """Compile an HLSL shader.

        Args:
            source: HLSL source text
            entry: Entry point function name
            profile: Target profile, e.g. "ps_4_0"

        Returns:
            The compiled bytecode

        Raises:
            BytecodeCompileError: If the compiler rejects the shader
        """
        ...


class FXCCompiler:
    """Compiles HLSL with the fxc command line compiler."""

    def __init__(self, tool: str, scratch_dir: str | Path):
        self.tool = tool
        self.scratch_dir = Path(scratch_dir)

    def __call__(self, source: str, entry: str, profile: str) -> bytes:
        src_path = self.scratch_dir / "shader.hlsl"
        out_path = self.scratch_dir / "shader.cso"
        try:
            src_path.write_bytes(source.encode("utf-8"))
        except OSError as e:
            raise FileAccessError(f"{src_path}: cannot write: {e}", src_path) from e
        cmd = [
            self.tool,
            "/nologo",
            "/E",
            entry,
            "/T",
            profile,
            "/Fo",
            str(out_path),
            str(src_path),
        ]
        logger.debug(f"Running {' '.join(cmd)}")
        try:
            try:
                result = subprocess.run(
                    cmd, capture_output=True, text=True, check=False
                )
            except OSError as e:
                raise ToolInvocationError(
                    f"cannot run {self.tool}: {e}", tool=self.tool
                ) from e
            if result.returncode != 0:
                raise BytecodeCompileError(profile, result.stderr)
            try:
                return out_path.read_bytes()
            except OSError as e:
                raise BytecodeCompileError(profile, f"no output: {e}") from e
        finally:
            for path in (src_path, out_path):
                try:
                    os.remove(path)
                except OSError:
                    pass


def compile_hlsl(
    compiler: HLSLCompiler, source: str, stage: ShaderStage, entry: str = "main"
) -> bytes:
    """Compile HLSL at the most compatible feature level that works.

    Level 9.1 is tried first. Only a few shaders need features beyond it;
    those are compiled for plain shader model 4.0 instead.

    Args:
        compiler: Compiler to run
        source: HLSL source text
        stage: Stage of the shader, selects the vs/ps profile
        entry: Entry point function name

    Returns:
        The compiled bytecode

    Raises:
        BytecodeCompileError: If compilation fails at both feature levels
    """
    compatible, fallback = (stage.profile_prefix + level for level in FEATURE_LEVELS)
    try:
        return compiler(source, entry, compatible)
    except BytecodeCompileError as e:
        logger.info(f"{compatible} failed, retrying with {fallback}")
        if e.stderr.strip():
            logger.debug(e.stderr.rstrip())
    try:
        return compiler(source, entry, fallback)
    except BytecodeCompileError as e:
        if e.stderr.strip():
            logger.warning(e.stderr.rstrip())
        raise
