"""Exceptions raised while converting shaders.

Every error is fatal to a generator run: nothing catches these below the
command line interface, which reports the message and exits non-zero.
"""


class ShaderConvError(Exception):
    """Base class for all shader conversion errors"""

    def __init__(self, message: str, context=None):
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self):
        if self.context:
            return f"{self.context}: {self.message}"
        return self.message


class TemplateError(ShaderConvError):
    """A shader source could not be read or rendered as a template"""

    def __init__(self, message: str, path=None):
        super().__init__(f"Template error: {message}")
        self.path = path


class ToolInvocationError(ShaderConvError):
    """An external tool failed or did not produce its expected outputs

    The tool's own diagnostics are kept in ``stderr`` rather than in the
    message, so the message stays a single line.
    """

    def __init__(self, message: str, tool=None, stderr: str = ""):
        super().__init__(message)
        self.tool = tool
        self.stderr = stderr


class FileAccessError(ShaderConvError):
    """A shader, scratch file or the generated module could not be accessed"""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class ReflectionParseError(ShaderConvError):
    """A reflection document is malformed"""

    def __init__(self, message: str):
        super().__init__(f"Reflection error: {message}")


class UnsupportedTypeError(ReflectionParseError):
    """A reflected type has no portable equivalent"""

    def __init__(self, type_name: str):
        super().__init__(f"unsupported data type: {type_name}")
        self.type_name = type_name


class BytecodeCompileError(ShaderConvError):
    """The HLSL bytecode compiler rejected a shader"""

    def __init__(self, profile: str, stderr: str = ""):
        super().__init__(f"HLSL compilation failed for profile {profile}")
        self.profile = profile
        self.stderr = stderr


__all__ = [
    "ShaderConvError",
    "TemplateError",
    "ToolInvocationError",
    "FileAccessError",
    "ReflectionParseError",
    "UnsupportedTypeError",
    "BytecodeCompileError",
]
