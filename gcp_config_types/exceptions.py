# -*- coding: utf-8 -*-


class TypesError(Exception):
    """Base Error class."""

    CUSTOM_ERROR_MESSAGE = "{}"

    def __init__(self, message, attrs=None, error=None):
        super(TypesError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(message))
        self._attrs = dict(attrs or {})
        self._error = error

    @property
    def attrs(self):
        return dict(self._attrs)

    @property
    def error(self):
        return self._error


class SecretError(TypesError):
    """Base Error class for secret resolution."""


class UnsupportedProtocol(SecretError):
    CUSTOM_ERROR_MESSAGE = "Secret does not contain a supported protocol: {}"


class ParseError(SecretError):
    CUSTOM_ERROR_MESSAGE = "Failed to parse secret: {}"


class ProviderError(SecretError):
    CUSTOM_ERROR_MESSAGE = "Secret provider failed: {}"

    @property
    def reason(self):
        return self._attrs.get("reason")


class PathError(TypesError):
    CUSTOM_ERROR_MESSAGE = "Path operation failed: {}"

    @property
    def path(self):
        return self._attrs.get("path", self._attrs.get("file"))


class PathChmodError(PathError):
    CUSTOM_ERROR_MESSAGE = "Path permissions could not be changed: {}"


class PathChownError(PathError):
    CUSTOM_ERROR_MESSAGE = "Path ownership could not be changed: {}"


class PathCreateError(PathError):
    CUSTOM_ERROR_MESSAGE = "Path could not be created: {}"


class PathOpenFileError(PathError):
    CUSTOM_ERROR_MESSAGE = "File could not be opened: {}"


class PathWriteError(PathError):
    CUSTOM_ERROR_MESSAGE = "File could not be written: {}"
