"""Fixtures and configuration for pytest.

The external tools are replaced by small Python scripts that follow the same
command line and output file contract:

* fake glslcc prefixes the rendered shader with a header naming the target,
  and writes the JSON found on a ``// reflect: `` line of the shader as the
  reflection document. A shader containing ``#error`` makes it fail and one
  containing ``// no-output`` makes it exit without writing anything.
* fake fxc writes ``DXBC<profile>`` as bytecode. Shaders containing
  ``needs_sm4`` fail at level 9.1 and shaders containing ``fxc_fail`` always
  fail.
"""

import json
import stat
import sys
from pathlib import Path

import pytest

from shaderconv.config import ConverterConfig

FAKE_GLSLCC = '''
import json, os, sys

args = sys.argv[1:]
log = os.environ.get("FAKE_GLSLCC_LOG")
if log:
    with open(log, "a") as f:
        f.write(json.dumps(args) + "\\n")


def opt(name):
    return args[args.index(name) + 1]


base = opt("--output")
lang = opt("--lang")
profile = opt("--profile")
if "--vert" in args:
    suffix, path = "vs", opt("--vert")
else:
    suffix, path = "fs", opt("--frag")
with open(path) as f:
    src = f.read()
if "#error" in src:
    sys.stderr.write(path + ":1: error: syntax error\\n")
    sys.exit(1)
if "// no-output" in src:
    sys.exit(0)
reflect = "{}"
body = []
for line in src.splitlines():
    if line.startswith("// reflect: "):
        reflect = line[len("// reflect: "):]
    else:
        body.append(line)
if lang == "hlsl":
    header = "// hlsl " + profile
    if "--defines=HLSL" in args:
        header += " HLSL"
elif lang == "gles" and profile == "300":
    header = "#version 300 es"
else:
    header = "#version " + profile
with open(base + "_" + suffix, "w") as f:
    f.write(header + "\\n" + "\\n".join(body) + "\\n")
with open(base + "_" + suffix + ".json", "w") as f:
    f.write(reflect)
'''

FAKE_FXC = '''
import sys

args = sys.argv[1:]
profile = args[args.index("/T") + 1]
out = args[args.index("/Fo") + 1]
with open(args[-1]) as f:
    src = f.read()
if "fxc_fail" in src or ("needs_sm4" in src and profile.endswith("level_9_1")):
    sys.stderr.write("error X3000: unsupported for " + profile + "\\n")
    sys.exit(1)
with open(out, "wb") as f:
    f.write(b"DXBC" + profile.encode())
'''

COLOR_BLOCK = {
    "id": 12,
    "name": "Color",
    "set": 0,
    "binding": 0,
    "block_size": 16,
    "members": [{"name": "_color", "type": "float4", "offset": 0, "size": 16}],
}

VERT_REFLECTION = {
    "vs": {
        "inputs": [
            {
                "id": 1,
                "name": "uv",
                "location": 1,
                "semantic": "TEXCOORD",
                "semantic_index": 0,
                "type": "float2",
            },
            {
                "id": 0,
                "name": "pos",
                "location": 0,
                "semantic": "POSITION",
                "semantic_index": 0,
                "type": "float2",
            },
        ],
        "uniform_buffers": [
            {
                "id": 3,
                "name": "Block",
                "set": 0,
                "binding": 1,
                "block_size": 16,
                "members": [
                    {"name": "transform", "type": "float4", "offset": 0, "size": 16}
                ],
            }
        ],
    }
}

FRAG_REFLECTION = {"fs": {"uniform_buffers": [COLOR_BLOCK]}}

VERT_SHADER = f"""// reflect: {json.dumps(VERT_REFLECTION)}
layout(location=0) in vec2 pos;
layout(location=1) in vec2 uv;
out vec2 vUV;
void main() {{
    vUV = uv;
    gl_Position = vec4(pos, 0, 1);
}}
"""

FRAG_SHADER = f"""// reflect: {json.dumps(FRAG_REFLECTION)}
{{{{ header }}}}
in vec2 vUV;
out vec4 fragColor;
void main() {{
    fragColor = {{{{ fetch_color_expr }}}};
}}
"""


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "tools: mark test as running the fake external tools"
    )


def _write_script(path: Path, body: str) -> str:
    path.write_text(f"#!{sys.executable}\n{body}")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


@pytest.fixture
def fake_glslcc(tmp_path):
    """Path of an executable standing in for glslcc."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)
    return _write_script(bin_dir / "glslcc", FAKE_GLSLCC)


@pytest.fixture
def fake_fxc(tmp_path):
    """Path of an executable standing in for fxc."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)
    return _write_script(bin_dir / "fxc", FAKE_FXC)


@pytest.fixture
def glslcc_log(tmp_path, monkeypatch):
    """File the fake glslcc appends its arguments to, one JSON list per call."""
    log = tmp_path / "glslcc.log"
    monkeypatch.setenv("FAKE_GLSLCC_LOG", str(log))
    return log


@pytest.fixture
def scratch_dir(tmp_path):
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def shader_dir(tmp_path):
    """A shader directory with a single-variant vertex shader and a
    two-variant fragment shader, plus a file that is not a shader."""
    path = tmp_path / "shaders"
    path.mkdir()
    (path / "blit.vert").write_text(VERT_SHADER)
    (path / "blit.frag").write_text(FRAG_SHADER)
    (path / "README.txt").write_text("not a shader")
    return path


@pytest.fixture
def config(tmp_path, shader_dir, fake_glslcc, fake_fxc):
    """Configuration running the fake tools without a formatter."""
    return ConverterConfig(
        package="gpu",
        shader_dir=shader_dir,
        output=tmp_path / "shaders.go",
        glslcc=fake_glslcc,
        hlsl_compiler=fake_fxc,
        formatter=(),
    )


@pytest.fixture(autouse=True)
def _no_tool_overrides(monkeypatch):
    """Keep the caller's tool overrides out of the tests."""
    for name in ("SHADERCONV_GLSLCC", "SHADERCONV_FXC", "SHADERCONV_FORMATTER"):
        monkeypatch.delenv(name, raising=False)
