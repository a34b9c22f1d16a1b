"""Tests for the Go module emitter."""

from shaderconv.emitter import emit_module, go_bytes, go_string
from shaderconv.models import (
    DataType,
    InputLocation,
    ReflectionInfo,
    ShaderRecord,
    ShaderSources,
    TextureBinding,
    UniformBlock,
    UniformLocation,
    UniformsReflection,
)


def _sources(tag: str, **kwargs) -> ShaderSources:
    return ShaderSources(
        glsl100es=f"#version 100\n{tag}\n",
        glsl300es=f"#version 300 es\n{tag}\n",
        glsl130=f"#version 130\n{tag}\n",
        glsl150=f"#version 150\n{tag}\n",
        hlsl=b"\x44\x58",
        hlsl_src=f"// hlsl {tag}",
        **kwargs,
    )


class TestGoLiterals:
    def test_string_escapes(self):
        assert go_string('a "b"\n\tc\\') == '"a \\"b\\"\\n\\tc\\\\"'

    def test_string_keeps_unicode(self):
        assert go_string("é") == '"é"'

    def test_bytes(self):
        assert go_bytes(b"\x00\xff", "\t") == "[]byte{\n\t\t0x00, 0xff,\n\t}"

    def test_bytes_wrap(self):
        lines = go_bytes(bytes(range(20)), "").splitlines()
        assert len(lines) == 4
        assert lines[1].count("0x") == 16
        assert lines[2] == "\t0x10, 0x11, 0x12, 0x13,"

    def test_empty_bytes(self):
        assert go_bytes(b"", "") == "nil"


class TestModule:
    """Layout of the generated module."""

    def test_header(self):
        code = emit_module("gpu", [])
        assert code == (
            "// Code generated by shaderconv. DO NOT EDIT.\n"
            "\n"
            "package gpu\n"
            "\n"
            'import "gioui.org/gpu/backend"\n'
            "\n"
            "var (\n"
            ")\n"
        )

    def test_single_variant(self):
        """Identical variants are emitted as one ShaderSources value."""
        record = ShaderRecord("copy.vert", [_sources("same"), _sources("same")])
        code = emit_module("gpu", [record])
        assert "\tshader_copy_vert = backend.ShaderSources{\n" in code
        assert "[...]" not in code
        assert code.count("GLSL100ES:") == 1

    def test_two_variants(self):
        """Differing variants are emitted as a two element array, solid first."""
        record = ShaderRecord("blit.frag", [_sources("solid"), _sources("textured")])
        code = emit_module("gpu", [record])
        assert "\tshader_blit_frag = [...]backend.ShaderSources{\n" in code
        assert code.count("GLSL100ES:") == 2
        assert code.index('"#version 100\\nsolid\\n"') < code.index(
            '"#version 100\\ntextured\\n"'
        )

    def test_field_order(self):
        reflection = ReflectionInfo(
            inputs=[InputLocation("pos", 0, "POSITION", 0, DataType.FLOAT, 2)],
            uniforms=UniformsReflection(
                blocks=[UniformBlock("Color", 0)],
                locations=[UniformLocation("_3._color", DataType.FLOAT, 4, 0)],
                size=16,
            ),
            textures=[TextureBinding("tex", 1)],
        )
        record = ShaderRecord("x.frag", [_sources("a", reflection=reflection)])
        code = emit_module("gpu", [record])
        fields = [
            "Inputs:",
            "Uniforms:",
            "Blocks:",
            "Locations:",
            "Size: 16,",
            "Textures:",
            "GLSL100ES:",
            "GLSL300ES:",
            "GLSL130:",
            "GLSL150:",
            "/*\n// hlsl a\n",
            "HLSL: []byte{",
        ]
        positions = [code.index(f) for f in fields]
        assert positions == sorted(positions)
        assert (
            '{Name: "pos", Location: 0, Semantic: "POSITION", SemanticIndex: 0, '
            "Type: backend.DataTypeFloat, Size: 2}" in code
        )
        assert '{Name: "Color", Binding: 0}' in code
        assert (
            '{Name: "_3._color", Type: backend.DataTypeFloat, Size: 4, Offset: 0}'
            in code
        )
        assert '{Name: "tex", Binding: 1}' in code

    def test_empty_reflection_omitted(self):
        record = ShaderRecord("x.vert", [_sources("a")])
        code = emit_module("gpu", [record])
        assert "Inputs:" not in code
        assert "Uniforms:" not in code
        assert "Textures:" not in code

    def test_hlsl_comment_cannot_terminate_early(self):
        src = _sources("a")
        src.hlsl_src = "/* nested */ float4 main();"
        code = emit_module("gpu", [ShaderRecord("x.vert", [src])])
        assert "/* nested * / float4 main();" in code

    def test_output_is_deterministic(self):
        records = [
            ShaderRecord("a.frag", [_sources("1"), _sources("2")]),
            ShaderRecord("b.vert", [_sources("3"), _sources("3")]),
        ]
        assert emit_module("gpu", records) == emit_module("gpu", records)
