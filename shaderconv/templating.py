"""Rendering of shader templates into variant sources.

Shader files are Jinja2 templates. Two placeholders are available:

    {{ header }}            declarations needed by the color expression
    {{ fetch_color_expr }}  expression producing the color of a fragment

Shaders written for the Go text/template syntax may use ``{{.Header}}`` and
``{{.FetchColorExpr}}`` instead; these are rewritten to the names above
before the template is compiled.

Any other placeholder is an error, so a typo never silently renders as an
empty string.
"""

import os
import re
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict, fields
from pathlib import Path

import jinja2
from loguru import logger

from shaderconv.errors import FileAccessError, TemplateError
from shaderconv.models import ShaderArgs


_DOT_PLACEHOLDER = re.compile(r"\{\{\s*\.(\w+)\s*\}\}")

# Go field name to template variable, e.g. FetchColorExpr -> fetch_color_expr.
_DOT_NAMES = {
    "".join(word.capitalize() for word in f.name.split("_")): f.name
    for f in fields(ShaderArgs)
}


class _ShaderLoader(jinja2.FileSystemLoader):
    """Loads shader templates, translating ``{{.Name}}`` placeholders."""

    def get_source(self, environment, template):
        source, filename, uptodate = super().get_source(environment, template)

        def replace(m: re.Match) -> str:
            name = _DOT_NAMES.get(m.group(1))
            if name is None:
                lineno = source.count("\n", 0, m.start()) + 1
                raise jinja2.TemplateSyntaxError(
                    f"unknown placeholder {m.group(0)}", lineno, template, filename
                )
            return "{{ " + name + " }}"

        return _DOT_PLACEHOLDER.sub(replace, source), filename, uptodate


def _environment(shader_dir: Path) -> jinja2.Environment:
    return jinja2.Environment(
        loader=_ShaderLoader(str(shader_dir)),
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )


def render_shader(path: str | Path, args: ShaderArgs) -> str:
    """Render a shader template with the given variant arguments.

    Args:
        path: Shader template file
        args: Variant arguments substituted into the template

    Returns:
        The rendered shader source

    Raises:
        TemplateError: If the file cannot be read, does not parse, or uses a
            placeholder other than the variant arguments
    """
    path = Path(path)
    env = _environment(path.parent)
    try:
        template = env.get_template(path.name)
        return template.render(**asdict(args))
    except jinja2.TemplateNotFound as e:
        raise TemplateError(f"{path}: cannot read shader", path) from e
    except jinja2.TemplateSyntaxError as e:
        raise TemplateError(f"{path}:{e.lineno}: {e.message}", path) from e
    except jinja2.UndefinedError as e:
        raise TemplateError(f"{path}: {e.message}", path) from e
    except (OSError, UnicodeDecodeError) as e:
        raise TemplateError(f"{path}: {e}", path) from e


@contextmanager
def rendered_shader(
    path: str | Path, args: ShaderArgs, scratch_dir: str | Path
) -> Iterator[Path]:
    """Render a shader template into a scratch file.

    The scratch file keeps the base name of the template so tools can infer
    the stage from its extension. It is removed when the context exits.

    Args:
        path: Shader template file
        args: Variant arguments substituted into the template
        scratch_dir: Directory the rendered file is written to

    Yields:
        Path of the rendered shader
    """
    src = render_shader(path, args)
    tmppath = Path(scratch_dir) / Path(path).name
    try:
        tmppath.write_bytes(src.encode("utf-8"))
    except OSError as e:
        raise FileAccessError(f"{tmppath}: cannot write: {e}", tmppath) from e
    logger.debug(f"Rendered {path} to {tmppath}")
    try:
        yield tmppath
    finally:
        try:
            os.remove(tmppath)
        except FileNotFoundError:
            pass
