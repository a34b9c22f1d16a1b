"""Parser for glslcc reflection documents.

glslcc writes one JSON document per compiled stage, keyed by stage::

    {
        "vs": {"inputs": [...], "uniform_buffers": [...], "textures": [...]},
        "fs": {"inputs": [...], "uniform_buffers": [...], "textures": [...]}
    }

The parser turns it into a ``ReflectionInfo``: vertex inputs sorted by
location, every uniform block flattened into a single buffer layout and the
texture bindings. Uniform blocks and textures come from the vertex stage when
it declares any, otherwise from the fragment stage.
"""

import json
from typing import Any

from loguru import logger

from shaderconv.errors import ReflectionParseError
from shaderconv.models import (
    InputLocation,
    ReflectionInfo,
    TextureBinding,
    UniformBlock,
    UniformLocation,
    UniformsReflection,
)
from shaderconv.type_mappings import parse_data_type


def _object(value: Any, what: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ReflectionParseError(f"expected an object for {what}")
    return value


def _list(doc: dict[str, Any], key: str, what: str) -> list[dict[str, Any]]:
    value = doc.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ReflectionParseError(f"expected a list for {what}.{key}")
    return [_object(item, f"{what}.{key}[]") for item in value]


def _int(entry: dict[str, Any], key: str) -> int:
    value = entry.get(key, 0)
    # bool is an int subclass but never a valid slot or size
    if isinstance(value, bool) or not isinstance(value, int):
        raise ReflectionParseError(f"expected an integer for {key!r}, got {value!r}")
    return value


def _str(entry: dict[str, Any], key: str) -> str:
    value = entry.get(key, "")
    if not isinstance(value, str):
        raise ReflectionParseError(f"expected a string for {key!r}, got {value!r}")
    return value


def _parse_inputs(stage: dict[str, Any]) -> list[InputLocation]:
    inputs = []
    for entry in _list(stage, "inputs", "vs"):
        data_type, size = parse_data_type(_str(entry, "type"))
        inputs.append(
            InputLocation(
                name=_str(entry, "name"),
                location=_int(entry, "location"),
                semantic=_str(entry, "semantic"),
                semantic_index=_int(entry, "semantic_index"),
                type=data_type,
                size=size,
            )
        )
    # glslcc does not guarantee any particular order
    inputs.sort(key=lambda i: i.location)
    return inputs


def _parse_uniforms(blocks: list[dict[str, Any]]) -> UniformsReflection:
    uniforms = UniformsReflection()
    block_offset = 0
    for block in blocks:
        block_id = _int(block, "id")
        uniforms.blocks.append(
            UniformBlock(name=_str(block, "name"), binding=_int(block, "binding"))
        )
        for member in _list(block, "members", "uniform_buffers[]"):
            data_type, size = parse_data_type(_str(member, "type"))
            uniforms.locations.append(
                UniformLocation(
                    # Synthetic name generated by glslcc.
                    name=f"_{block_id}.{_str(member, 'name')}",
                    type=data_type,
                    size=size,
                    offset=block_offset + _int(member, "offset"),
                )
            )
        block_offset += _int(block, "block_size")
    uniforms.size = block_offset
    return uniforms


def parse_reflection(data: bytes | str) -> ReflectionInfo:
    """Decode a glslcc reflection document.

    Args:
        data: Raw JSON reflection output

    Returns:
        Normalized reflection info

    Raises:
        ReflectionParseError: If the document is malformed
        UnsupportedTypeError: If an input or uniform member has a type
            outside the supported float/int vocabulary
    """
    try:
        doc = json.loads(data)
    except (ValueError, TypeError) as e:
        raise ReflectionParseError(f"invalid JSON: {e}") from e

    doc = _object(doc, "reflection document")
    vs = _object(doc.get("vs"), "vs")
    fs = _object(doc.get("fs"), "fs")

    info = ReflectionInfo()
    info.inputs = _parse_inputs(vs)

    blocks = _list(vs, "uniform_buffers", "vs") or _list(fs, "uniform_buffers", "fs")
    info.uniforms = _parse_uniforms(blocks)

    textures = _list(vs, "textures", "vs") or _list(fs, "textures", "fs")
    info.textures = [
        TextureBinding(name=_str(t, "name"), binding=_int(t, "binding"))
        for t in textures
    ]

    logger.debug(
        f"Reflected {len(info.inputs)} inputs, {len(info.uniforms.blocks)} "
        f"uniform blocks, {len(info.textures)} textures"
    )
    return info
