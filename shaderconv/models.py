"""
Data models for the shader converter.

This module contains the dataclass definitions that describe converted
shaders: reflection metadata, the per-variant shader sources and the records
that end up in the generated module. The field layout mirrors the
``gioui.org/gpu/backend`` types the generated code is compiled against.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from shaderconv.errors import ToolInvocationError


class DataType(Enum):
    """Portable scalar kinds understood by the GPU backend."""

    FLOAT = "DataTypeFloat"
    INT = "DataTypeInt"


class ShaderStage(Enum):
    """Pipeline stage of a shader, derived from its file extension.

    Each value is ``(extension, glslcc flag, output suffix, HLSL profile prefix)``.
    """

    VERTEX = (".vert", "--vert", "vs", "vs")
    FRAGMENT = (".frag", "--frag", "fs", "ps")

    @property
    def extension(self) -> str:
        return self.value[0]

    @property
    def flag(self) -> str:
        return self.value[1]

    @property
    def suffix(self) -> str:
        return self.value[2]

    @property
    def profile_prefix(self) -> str:
        return self.value[3]

    @classmethod
    def from_path(cls, path: str | Path) -> "ShaderStage":
        """Return the stage for a shader file.

        Raises:
            ToolInvocationError: If the extension is neither .vert nor .frag
        """
        ext = Path(path).suffix
        for stage in cls:
            if stage.extension == ext:
                return stage
        raise ToolInvocationError(f"unrecognized shader type: {path}")


@dataclass(frozen=True)
class Target:
    """A (language, profile) pair passed to the cross-compiler.

    Attributes:
        lang: glslcc --lang value
        profile: glslcc --profile value
        source_field: ShaderSources field receiving the translated source
    """

    lang: str
    profile: str
    source_field: str

    def __str__(self) -> str:
        return f"{self.lang} {self.profile}"


GLSL100ES = Target("gles", "100", "glsl100es")
GLSL300ES = Target("gles", "300", "glsl300es")
GLSL130 = Target("glsl", "130", "glsl130")
HLSL40 = Target("hlsl", "40", "hlsl_src")

# Order matters: reflection is read from the first target only.
TARGETS: tuple[Target, ...] = (GLSL100ES, GLSL300ES, GLSL130, HLSL40)


@dataclass(frozen=True)
class ShaderArgs:
    """Template parameters that select a shader variant.

    Attributes:
        fetch_color_expr: GLSL expression producing the fragment color
        header: Declarations the expression depends on
    """

    fetch_color_expr: str
    header: str


@dataclass
class InputLocation:
    """A reflected vertex shader input.

    Attributes:
        name: Input variable name
        location: Attribute location slot
        semantic: HLSL semantic name
        semantic_index: HLSL semantic index
        type: Component kind
        size: Number of components
    """

    name: str
    location: int
    semantic: str
    semantic_index: int
    type: DataType
    size: int


@dataclass
class UniformBlock:
    """A uniform block and its binding point."""

    name: str
    binding: int


@dataclass
class UniformLocation:
    """A uniform block member placed in the flattened uniform buffer.

    Attributes:
        name: Synthetic ``_<block id>.<member>`` name
        type: Component kind
        size: Number of components
        offset: Byte offset from the start of the flattened buffer
    """

    name: str
    type: DataType
    size: int
    offset: int


@dataclass
class UniformsReflection:
    """All uniform blocks of a shader flattened into one buffer layout."""

    blocks: list[UniformBlock] = field(default_factory=list)
    locations: list[UniformLocation] = field(default_factory=list)
    size: int = 0


@dataclass
class TextureBinding:
    """A sampled texture and its binding point."""

    name: str
    binding: int


@dataclass
class ReflectionInfo:
    """Reflection metadata of one shader variant."""

    inputs: list[InputLocation] = field(default_factory=list)
    uniforms: UniformsReflection = field(default_factory=UniformsReflection)
    textures: list[TextureBinding] = field(default_factory=list)


@dataclass
class ShaderSources:
    """Every representation of one shader variant.

    Attributes:
        reflection: Inputs, uniform layout and textures
        glsl100es: GLSL ES 1.00 source
        glsl300es: GLSL ES 3.00 source
        glsl130: GLSL 1.30 source
        glsl150: GLSL 1.50 source, derived from glsl130
        hlsl: Compiled HLSL bytecode
        hlsl_src: HLSL source the bytecode was compiled from
    """

    reflection: ReflectionInfo = field(default_factory=ReflectionInfo)
    glsl100es: str = ""
    glsl300es: str = ""
    glsl130: str = ""
    glsl150: str = ""
    hlsl: bytes = b""
    hlsl_src: str = ""


@dataclass
class ShaderRecord:
    """The converted variants of a single shader file.

    Attributes:
        name: Base name of the shader file, e.g. ``blit.frag``
        variants: Sources per variant, in the order of the variant arguments
    """

    name: str
    variants: list[ShaderSources]

    @property
    def is_multi_variant(self) -> bool:
        # Shaders that ignore the variant arguments produce identical output.
        return (
            len(self.variants) > 1
            and self.variants[0].glsl100es != self.variants[1].glsl100es
        )

    @property
    def exported_variants(self) -> list[ShaderSources]:
        if self.is_multi_variant:
            return list(self.variants)
        return self.variants[:1]

    @property
    def var_name(self) -> str:
        return "shader_" + self.name.replace(".", "_")
