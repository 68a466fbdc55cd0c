from __future__ import annotations

from pathlib import Path


class PuggleError(Exception):
    code = 1


class ConfigError(PuggleError):
    code = 2


class FileNameError(PuggleError):
    def __init__(self, path: Path):
        super().__init__(f"path has no file name: {path}")
        self.path = path


class ParentError(PuggleError):
    def __init__(self, path: Path):
        super().__init__(f"path has no parent directory: {path}")
        self.path = path


class MetadataDeserializeError(PuggleError):
    def __init__(self, path: Path, diagnostic: str):
        super().__init__(f'failed to deserialize file "{path}" metadata. reason: {diagnostic}')
        self.path = path
        self.diagnostic = diagnostic


class MetadataMissingError(PuggleError):
    def __init__(self, path: Path):
        super().__init__(f"failed to extract metadata from file {path}")
        self.path = path


class AliasError(PuggleError):
    def __init__(self, path: Path, alias: str, reason: str):
        super().__init__(f'invalid alias "{alias}" in file {path}: {reason}')
        self.path = path
        self.alias = alias


class TemplateEnvironmentError(PuggleError):
    def __init__(self, diagnostic: str):
        super().__init__(f"failed to load template. reason: {diagnostic}")
        self.diagnostic = diagnostic


class TemplateRenderError(PuggleError):
    def __init__(self, diagnostic: str):
        super().__init__(f"failed to render template. reason: {diagnostic}")
        self.diagnostic = diagnostic


class EncodingError(PuggleError):
    def __init__(self, path: Path, reason: str):
        super().__init__(f"failed to read file {path} as UTF-8. reason: {reason}")
        self.path = path
        self.reason = reason
