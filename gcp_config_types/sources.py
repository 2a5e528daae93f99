# -*- coding: utf-8 -*-
"""Collaborators the secret resolver reads from.

The resolver never touches ``os.environ`` or the filesystem directly, it goes
through one of these so it can be driven from tests or from another source
entirely.
"""

import os
from abc import ABC, abstractmethod


class Environment(ABC):
    """Looks up environment style variables."""

    @abstractmethod
    def get(self, name):
        """
        Return the value of the named variable.

        :type name: str
        :param name: The variable name
        :return: The value, or an empty string if the variable is not set
        """
        return ""


class OSEnvironment(Environment):

    def get(self, name):
        return os.environ.get(name, "")


class MappingEnvironment(Environment):

    def __init__(self, values=None):
        self._values = dict(values or {})

    def get(self, name):
        return self._values.get(name, "")


class FileSystem(ABC):
    """Reads whole files."""

    @abstractmethod
    def read(self, path):
        """
        Return the contents of the file at path.

        Implementations raise OSError when the file cannot be read.

        :type path: str
        :param path: The path to read
        :return: bytes
        """
        return b""


class LocalFileSystem(FileSystem):

    def read(self, path):
        with open(path, "rb") as fh:
            return fh.read()
