class TokenExportError(Exception):
    """Base class for every error raised by the token export pipeline."""


class GeometryError(TokenExportError):
    pass


class SingularMatrixError(GeometryError):
    pass


class ParallelLinesError(GeometryError):
    pass


class DegenerateGradientError(GeometryError):
    pass


class PathResolutionError(TokenExportError):
    def __init__(self, path: str, segment: str):
        super().__init__(f"Could not resolve segment '{segment}' of path '{path}'")
        self.path = path
        self.segment = segment


class MissingDefinitionError(TokenExportError):
    pass


class ProviderError(TokenExportError):
    pass


class ConfigurationError(TokenExportError):
    pass
