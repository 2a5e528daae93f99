# -*- coding: utf-8 -*-
"""gcp_config_types

Small value types for service configuration: paths, file modes, user and group
ids, durations, byte sizes, sets, UUIDs and secrets resolved from literal values,
the environment, files or GCP Secret Manager.

"""

from __future__ import absolute_import

from gcp_config_types.account import UserID, GroupID
from gcp_config_types.decorators import InjectSecret, InjectCredentials
from gcp_config_types.duration import Duration, parse_duration
from gcp_config_types.exceptions import TypesError, \
    SecretError, \
    UnsupportedProtocol, \
    ParseError, \
    ProviderError, \
    PathError, \
    PathChmodError, \
    PathChownError, \
    PathCreateError, \
    PathOpenFileError, \
    PathWriteError
from gcp_config_types.ids import new_uuid, new_uuid_v8
from gcp_config_types.mode import FileMode, parse_file_mode
from gcp_config_types.path import Path
from gcp_config_types.secret import Protocol, \
    SecretResolver, \
    UsernamePasswordSecret, \
    GenericSecret, \
    MaskedUsernamePasswordSecret, \
    MaskedGenericSecret, \
    parse_username_password_secret, \
    parse_generic_secret
from gcp_config_types.secret_store import SecretStore, GCPSecretStore, StoredSecret
from gcp_config_types.sets import Set
from gcp_config_types.size import Size, parse_size
from gcp_config_types.sources import Environment, \
    OSEnvironment, \
    MappingEnvironment, \
    FileSystem, \
    LocalFileSystem
from ._version import __version__

__all__ = ["__version__",
           "Duration",
           "Environment",
           "FileMode",
           "FileSystem",
           "GCPSecretStore",
           "GenericSecret",
           "GroupID",
           "InjectCredentials",
           "InjectSecret",
           "LocalFileSystem",
           "MappingEnvironment",
           "MaskedGenericSecret",
           "MaskedUsernamePasswordSecret",
           "OSEnvironment",
           "ParseError",
           "Path",
           "PathChmodError",
           "PathChownError",
           "PathCreateError",
           "PathError",
           "PathOpenFileError",
           "PathWriteError",
           "Protocol",
           "ProviderError",
           "SecretError",
           "SecretResolver",
           "SecretStore",
           "Set",
           "Size",
           "StoredSecret",
           "TypesError",
           "UnsupportedProtocol",
           "UserID",
           "UsernamePasswordSecret",
           "new_uuid",
           "new_uuid_v8",
           "parse_duration",
           "parse_file_mode",
           "parse_generic_secret",
           "parse_size",
           "parse_username_password_secret"]
