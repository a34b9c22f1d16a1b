"""Wrapper around the glslcc cross-compiler.

glslcc compiles a GLSL shader through SPIRV-Cross into another shading
language and, with ``--reflect``, writes a JSON reflection document next to
the translated source. Each call produces exactly one (language, profile)
translation of one rendered shader.
"""

import os
import subprocess
from pathlib import Path

from loguru import logger

from shaderconv.errors import ToolInvocationError
from shaderconv.models import ShaderStage, Target

OUTPUT_BASE = "shader"


class CrossCompiler:
    """Runs glslcc with a fixed include directory and scratch directory."""

    def __init__(
        self,
        tool: str,
        include_dir: str | Path,
        scratch_dir: str | Path,
        flatten_ubos: bool = False,
    ):
        """Initialize the cross-compiler wrapper.

        Args:
            tool: Path of the glslcc executable
            include_dir: Directory searched for #include files, normally the
                directory holding the shader sources
            scratch_dir: Directory glslcc writes its outputs to
            flatten_ubos: Pass --flatten-ubos to glslcc
        """
        self.tool = tool
        self.include_dir = Path(include_dir).absolute()
        self.scratch_dir = Path(scratch_dir)
        self.flatten_ubos = flatten_ubos

    def command(self, path: str | Path, target: Target) -> list[str]:
        """Build the glslcc command line for one translation."""
        stage = ShaderStage.from_path(path)
        cmd = [
            self.tool,
            "--silent",
            "--optimize",
            "--include-dirs",
            str(self.include_dir),
            "--reflect",
            "--output",
            str(self.scratch_dir / OUTPUT_BASE),
            "--lang",
            target.lang,
            "--profile",
            target.profile,
            stage.flag,
            str(path),
        ]
        if target.lang == "hlsl":
            # Lets shared shader code branch on the target language.
            cmd.append("--defines=HLSL")
        if self.flatten_ubos:
            cmd.append("--flatten-ubos")
        return cmd

    def convert(self, path: str | Path, target: Target) -> tuple[str, bytes]:
        """Translate a rendered shader.

        Args:
            path: Rendered shader file; its extension selects the stage
            target: Language and profile to translate to

        Returns:
            Tuple of (translated source, raw reflection JSON)

        Raises:
            ToolInvocationError: If glslcc cannot be started, exits with an
                error, or leaves no output files behind
        """
        stage = ShaderStage.from_path(path)
        cmd = self.command(path, target)
        logger.debug(f"Running {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as e:
            raise ToolInvocationError(
                f"{path}: cannot run {self.tool}: {e}", tool=self.tool
            ) from e

        if result.stdout.strip():
            logger.debug(result.stdout.rstrip())
        if result.returncode != 0:
            if result.stderr.strip():
                logger.warning(result.stderr.rstrip())
            raise ToolInvocationError(
                f"{path} ({target}): {self.tool} exited with status "
                f"{result.returncode}",
                tool=self.tool,
                stderr=result.stderr,
            )
        if result.stderr.strip():
            logger.debug(result.stderr.rstrip())

        out_path = self.scratch_dir / f"{OUTPUT_BASE}_{stage.suffix}"
        json_path = out_path.with_name(out_path.name + ".json")
        try:
            src = out_path.read_bytes().decode("utf-8")
            reflect = json_path.read_bytes()
        except (OSError, UnicodeDecodeError) as e:
            raise ToolInvocationError(
                f"{path} ({target}): missing output from {self.tool}: {e}",
                tool=self.tool,
            ) from e
        finally:
            _remove(out_path, json_path)
        return src, reflect


def _remove(*paths: Path) -> None:
    for path in paths:
        try:
            os.remove(path)
        except OSError:
            pass
