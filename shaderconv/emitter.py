"""Go source emitter for converted shaders.

The generated module declares one ``shader_<name>`` variable per shader file
holding ``backend.ShaderSources`` values. Output depends only on the records
passed in, so regenerating with unchanged compiler output gives an identical
file.
"""

import json

from shaderconv.models import (
    InputLocation,
    ShaderRecord,
    ShaderSources,
    TextureBinding,
    UniformBlock,
    UniformLocation,
)

BACKEND_IMPORT = "gioui.org/gpu/backend"
HEADER = "// Code generated by shaderconv. DO NOT EDIT."
BYTES_PER_LINE = 16


def go_string(s: str) -> str:
    """Quote a string as a Go interpreted string literal."""
    # JSON string escapes are a subset of Go's.
    return json.dumps(s, ensure_ascii=False)


def go_bytes(data: bytes, indent: str) -> str:
    """Format bytes as a Go []byte literal."""
    if not data:
        return "nil"
    lines = []
    for i in range(0, len(data), BYTES_PER_LINE):
        chunk = data[i : i + BYTES_PER_LINE]
        lines.append(indent + "\t" + ", ".join(f"0x{b:02x}" for b in chunk) + ",")
    return "[]byte{\n" + "\n".join(lines) + "\n" + indent + "}"


def _input(i: InputLocation) -> str:
    return (
        f"{{Name: {go_string(i.name)}, Location: {i.location}, "
        f"Semantic: {go_string(i.semantic)}, SemanticIndex: {i.semantic_index}, "
        f"Type: backend.{i.type.value}, Size: {i.size}}}"
    )


def _block(b: UniformBlock) -> str:
    return f"{{Name: {go_string(b.name)}, Binding: {b.binding}}}"


def _location(u: UniformLocation) -> str:
    return (
        f"{{Name: {go_string(u.name)}, Type: backend.{u.type.value}, "
        f"Size: {u.size}, Offset: {u.offset}}}"
    )


def _texture(t: TextureBinding) -> str:
    return f"{{Name: {go_string(t.name)}, Binding: {t.binding}}}"


def _slice(type_name: str, elems: list[str], indent: str) -> str:
    body = "".join(f"{indent}\t{e},\n" for e in elems)
    return f"[]backend.{type_name}{{\n{body}{indent}}}"


class Emitter:
    """Renders shader records as a Go source module."""

    def __init__(self, package: str):
        self.package = package

    def emit(self, records: list[ShaderRecord]) -> str:
        """Generate the complete Go module."""
        lines = [
            HEADER,
            "",
            f"package {self.package}",
            "",
            f"import {go_string(BACKEND_IMPORT)}",
            "",
            "var (",
        ]
        for record in records:
            lines.extend(self.emit_record(record, "\t"))
        lines.append(")")
        return "\n".join(lines) + "\n"

    def emit_record(self, record: ShaderRecord, indent: str) -> list[str]:
        """Generate the variable declaration of one shader."""
        variants = record.exported_variants
        if not record.is_multi_variant:
            lines = self.emit_sources(variants[0], indent)
            lines[0] = f"{indent}{record.var_name} = backend.ShaderSources{{"
            return lines

        lines = [f"{indent}{record.var_name} = [...]backend.ShaderSources{{"]
        for src in variants:
            variant_lines = self.emit_sources(src, indent + "\t")
            variant_lines[-1] += ","
            lines.extend(variant_lines)
        lines.append(f"{indent}}}")
        return lines

    def emit_sources(self, src: ShaderSources, indent: str) -> list[str]:
        """Generate a ShaderSources composite literal.

        Fields are always written in the same order: reflection first, then
        the sources from GLSL ES 1.00 to HLSL.
        """
        inner = indent + "\t"
        reflection = src.reflection
        lines = [f"{indent}{{"]
        if reflection.inputs:
            elems = [_input(i) for i in reflection.inputs]
            lines.append(f"{inner}Inputs: {_slice('InputLocation', elems, inner)},")
        uniforms = reflection.uniforms
        if uniforms.blocks:
            field_indent = inner + "\t"
            blocks = [_block(b) for b in uniforms.blocks]
            locations = [_location(u) for u in uniforms.locations]
            lines.append(f"{inner}Uniforms: backend.UniformsReflection{{")
            lines.append(
                f"{field_indent}Blocks: "
                f"{_slice('UniformBlock', blocks, field_indent)},"
            )
            lines.append(
                f"{field_indent}Locations: "
                f"{_slice('UniformLocation', locations, field_indent)},"
            )
            lines.append(f"{field_indent}Size: {uniforms.size},")
            lines.append(f"{inner}}},")
        if reflection.textures:
            elems = [_texture(t) for t in reflection.textures]
            lines.append(f"{inner}Textures: {_slice('TextureBinding', elems, inner)},")
        lines.append(f"{inner}GLSL100ES: {go_string(src.glsl100es)},")
        lines.append(f"{inner}GLSL300ES: {go_string(src.glsl300es)},")
        lines.append(f"{inner}GLSL130: {go_string(src.glsl130)},")
        lines.append(f"{inner}GLSL150: {go_string(src.glsl150)},")
        # HLSL source kept next to the bytecode for inspection.
        lines.append(f"{inner}/*\n{src.hlsl_src.replace('*/', '* /')}\n{inner}*/")
        lines.append(f"{inner}HLSL: {go_bytes(src.hlsl, inner)},")
        lines.append(f"{indent}}}")
        return lines


def emit_module(package: str, records: list[ShaderRecord]) -> str:
    """Render shader records as a Go source module.

    Args:
        package: Go package name
        records: Converted shaders, in output order

    Returns:
        Go source text
    """
    return Emitter(package).emit(records)
