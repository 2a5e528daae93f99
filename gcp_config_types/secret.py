# -*- coding: utf-8 -*-
"""Credential and generic secret values parsed from protocol tagged strings.

A secret is written in configuration as ``PROTOCOL://PAYLOAD``:

raw://DATA                  DATA itself (``username:password`` for credentials)
base64://DATA               DATA base64-encoded
env://VAR                   environment variable VAR (``USER_VAR:PASS_VAR`` for credentials)
env+base64://VAR            as env but each variable holds base64-encoded data
file://PATH                 contents of PATH; credential files ending in .json, .yaml
                            or .yml hold "username" and "password" keys, any other
                            file holds ``username:password``
file+base64://PATH          as file but the values (or whole content) are base64-encoded
secretstore://NAME          secret NAME from the secret store as a string; credential
                            secrets hold "username" and "password" as JSON
secretstore+binary://NAME   secret NAME from the secret store as binary data (generic only)

Once marshaled a secret is masked and can no longer be unmarshaled back to its
original value. Masked values are their own types so they can not be passed
along in place of a resolved secret.
"""

import base64
import binascii
import json
import logging
import re
from dataclasses import dataclass
from enum import Enum

import yaml

from .exceptions import ParseError, ProviderError, UnsupportedProtocol
from .secret_store import GCPSecretStore
from .sources import LocalFileSystem, OSEnvironment

USERNAME_MASK = "***********"
PASSWORD_MASK = "************"
GENERIC_MASK = "****************"

_SECRET_PATTERN = re.compile(r'^([^:/]+)://(.*)$', re.DOTALL)
_STRUCTURED_EXTENSIONS = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
}


class Protocol(Enum):
    RAW = "raw"
    BASE64 = "base64"
    ENV = "env"
    ENV_BASE64 = "env+base64"
    FILE = "file"
    FILE_BASE64 = "file+base64"
    SECRET_STORE = "secretstore"
    SECRET_STORE_BINARY = "secretstore+binary"


CREDENTIAL_PROTOCOLS = frozenset(p for p in Protocol if p is not Protocol.SECRET_STORE_BINARY)
GENERIC_PROTOCOLS = frozenset(Protocol)


def split_secret(secret, allowed=GENERIC_PROTOCOLS):
    """
    Split a tagged secret string into its protocol and payload.

    :type secret: str
    :param secret: The ``PROTOCOL://PAYLOAD`` string

    :type allowed: frozenset
    :param allowed: The protocols accepted by the caller

    :return: (Protocol, str)
    :raises UnsupportedProtocol: when no allowed protocol prefixes the string
    """
    match = _SECRET_PATTERN.match(secret)
    if match:
        try:
            protocol = Protocol(match.group(1))
        except ValueError:
            protocol = None
        if protocol in allowed:
            return protocol, match.group(2)
        scheme = match.group(1)
    else:
        scheme = None
    raise UnsupportedProtocol(f"'{scheme}'" if scheme else "no protocol given",
                              attrs={"scheme": scheme})


def _b64decode(data, what, attrs):
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ParseError(f"failed to decode {what}: {e}", attrs=attrs, error=e) from e


def _text(data, what, attrs):
    try:
        return data.decode("UTF-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"{what} is not valid UTF-8 text", attrs=attrs, error=e) from e


def _split_pair(data, message, attrs):
    pair = data.split(":", 1)
    if len(pair) != 2:
        raise ParseError(message, attrs=attrs)
    return pair[0], pair[1]


def _decode_document(text, kind, what, attrs):
    # messages carry only the position of a problem, never the offending text
    if kind == "json":
        try:
            return json.loads(text)
        except ValueError as e:
            problem = getattr(e, "msg", "invalid JSON")
            line, column = getattr(e, "lineno", None), getattr(e, "colno", None)
    else:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            problem = getattr(e, "problem", None) or "invalid YAML"
            mark = getattr(e, "problem_mark", None)
            line = mark.line + 1 if mark is not None else None
            column = mark.column + 1 if mark is not None else None
    where = f" at line {line} column {column}" if line is not None else ""
    raise ParseError(f"failed to unmarshal {what}: {problem}{where}", attrs=attrs)


def _load_structured(text, kind, what, attrs):
    doc = _decode_document(text, kind, f"credentials from {what}", attrs)
    if doc is None:
        doc = {}
    if not isinstance(doc, dict):
        raise ParseError(f"credentials in {what} must be a mapping", attrs=attrs)

    fields = []
    for key in ("username", "password"):
        value = doc.get(key)
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise ParseError(f"'{key}' in {what} must be a string", attrs=attrs)
        fields.append(value)
    return fields[0], fields[1]


@dataclass(frozen=True)
class MaskedUsernamePasswordSecret:
    """Display-only form of a UsernamePasswordSecret."""
    username: str
    password: str = PASSWORD_MASK

    def __str__(self):
        return f"{self.username}:{self.password}"

    def to_dict(self):
        return {"password": self.password, "username": self.username}


@dataclass(frozen=True)
class MaskedGenericSecret:
    """Display-only form of a GenericSecret."""
    data: str = GENERIC_MASK

    def __str__(self):
        return self.data


@dataclass(frozen=True)
class UsernamePasswordSecret:
    """A username and password pair."""
    username: str = ""
    password: str = ""

    @classmethod
    def parse(cls, secret, resolver=None, timeout=None):
        """
        Parse a tagged string into credentials.

        An empty string gives empty credentials.

        :type secret: str
        :param secret: The ``PROTOCOL://PAYLOAD`` string

        :type resolver: SecretResolver
        :param resolver: Resolver to use, defaults to the process wide resolver

        :type timeout: float
        :param timeout: Seconds allowed for any secret store lookup
        """
        return (resolver or default_resolver()).resolve_credentials(secret, timeout=timeout)

    @classmethod
    def from_config(cls, value, resolver=None):
        """Build from a config value: a mapping of the fields or a tagged string."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls()
        if isinstance(value, dict):
            username = value.get("username")
            password = value.get("password")
            username = "" if username is None else username
            password = "" if password is None else password
            if not isinstance(username, str) or not isinstance(password, str):
                raise ParseError("credential fields must be strings")
            return cls(username=username, password=password)
        if isinstance(value, str):
            return cls.parse(value, resolver=resolver)
        raise ParseError(f"can not build credentials from {type(value).__name__}")

    @classmethod
    def from_json(cls, text, resolver=None):
        return cls.from_config(_decode_document(text, "json", "JSON document", {}), resolver=resolver)

    @classmethod
    def from_yaml(cls, text, resolver=None):
        return cls.from_config(_decode_document(text, "yaml", "YAML document", {}), resolver=resolver)

    def masked(self):
        username = f"{self.username[0]}{USERNAME_MASK}" if self.username else ""
        return MaskedUsernamePasswordSecret(username=username)

    def __str__(self):
        return str(self.masked())

    def __repr__(self):
        return f"UsernamePasswordSecret('{self.masked()}')"

    def to_dict(self):
        return self.masked().to_dict()

    def to_json(self):
        return json.dumps(self.to_dict())

    def to_yaml(self):
        return yaml.safe_dump(self.to_dict(), default_flow_style=False)


@dataclass(frozen=True)
class GenericSecret:
    """Arbitrary secret data."""
    data: bytes = b""

    @classmethod
    def parse(cls, secret, resolver=None, timeout=None):
        """
        Parse a tagged string into a secret.

        An empty string gives an empty secret.
        """
        return (resolver or default_resolver()).resolve_generic(secret, timeout=timeout)

    @classmethod
    def from_config(cls, value, resolver=None):
        """Build from a config value.

        A mapping is taken as already resolved and its "data" entry as base64
        text. A string is parsed as a tagged secret.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls()
        if isinstance(value, dict):
            data = value.get("data") or b""
            if isinstance(data, str):
                data = _b64decode(data, "secret data", {})
            if not isinstance(data, bytes):
                raise ParseError("secret data must be base64 text or bytes")
            return cls(data=data)
        if isinstance(value, str):
            return cls.parse(value, resolver=resolver)
        raise ParseError(f"can not build a secret from {type(value).__name__}")

    @classmethod
    def from_json(cls, text, resolver=None):
        return cls.from_config(_decode_document(text, "json", "JSON document", {}), resolver=resolver)

    @classmethod
    def from_yaml(cls, text, resolver=None):
        return cls.from_config(_decode_document(text, "yaml", "YAML document", {}), resolver=resolver)

    def text(self, encoding="UTF-8"):
        return self.data.decode(encoding)

    def masked(self):
        return MaskedGenericSecret()

    def __str__(self):
        return str(self.masked())

    def __repr__(self):
        return f"GenericSecret('{self.masked()}')"

    def to_dict(self):
        return {"data": self.masked().data}

    def to_json(self):
        return json.dumps(self.masked().data)

    def to_yaml(self):
        return yaml.safe_dump(self.masked().data)


class SecretResolver:
    """Resolves tagged secret strings using injected collaborators.

    Resolvers hold no per call state, one instance can serve any number of
    threads as long as its collaborators can.
    """

    def __init__(self, environment=None, filesystem=None, secret_store=None):
        """
        :type environment: gcp_config_types.sources.Environment
        :param environment: defaults to the process environment

        :type filesystem: gcp_config_types.sources.FileSystem
        :param filesystem: defaults to the local filesystem

        :type secret_store: gcp_config_types.secret_store.SecretStore
        :param secret_store: defaults to GCP Secret Manager, created on first use
        """
        self.environment = environment if environment is not None else OSEnvironment()
        self.filesystem = filesystem if filesystem is not None else LocalFileSystem()
        self._secret_store = secret_store
        self._credential_handlers = {
            Protocol.RAW: self._raw_credentials,
            Protocol.BASE64: self._base64_credentials,
            Protocol.ENV: self._env_credentials,
            Protocol.ENV_BASE64: self._env_base64_credentials,
            Protocol.FILE: self._file_credentials,
            Protocol.FILE_BASE64: self._file_base64_credentials,
            Protocol.SECRET_STORE: self._secret_store_credentials,
        }
        self._generic_handlers = {
            Protocol.RAW: self._raw_generic,
            Protocol.BASE64: self._base64_generic,
            Protocol.ENV: self._env_generic,
            Protocol.ENV_BASE64: self._env_base64_generic,
            Protocol.FILE: self._file_generic,
            Protocol.FILE_BASE64: self._file_base64_generic,
            Protocol.SECRET_STORE: self._secret_store_generic,
            Protocol.SECRET_STORE_BINARY: self._secret_store_binary_generic,
        }
        assert set(self._credential_handlers) == CREDENTIAL_PROTOCOLS
        assert set(self._generic_handlers) == GENERIC_PROTOCOLS

    @property
    def secret_store(self):
        if self._secret_store is None:
            self._secret_store = GCPSecretStore()
        return self._secret_store

    def resolve_credentials(self, secret, timeout=None):
        """
        Resolve a tagged string into a UsernamePasswordSecret.

        :raises UnsupportedProtocol: unknown protocol
        :raises ParseError: malformed payload or unreadable source
        :raises ProviderError: secret store failure
        """
        if secret == "":
            return UsernamePasswordSecret()
        protocol, payload = split_secret(secret, CREDENTIAL_PROTOCOLS)
        logging.getLogger(__name__).debug(f"Resolving credentials using {protocol.value} protocol")
        username, password = self._credential_handlers[protocol](payload, timeout)
        return UsernamePasswordSecret(username=username, password=password)

    def resolve_generic(self, secret, timeout=None):
        """
        Resolve a tagged string into a GenericSecret.

        :raises UnsupportedProtocol: unknown protocol
        :raises ParseError: malformed payload or unreadable source
        :raises ProviderError: secret store failure
        """
        if secret == "":
            return GenericSecret()
        protocol, payload = split_secret(secret, GENERIC_PROTOCOLS)
        logging.getLogger(__name__).debug(f"Resolving secret using {protocol.value} protocol")
        return GenericSecret(data=self._generic_handlers[protocol](payload, timeout))

    def _getenv(self, name):
        value = self.environment.get(name)
        # unset variables are treated as empty rather than as an error
        if not value:
            logging.getLogger(__name__).debug(f"Environment variable {name} is empty or not set")
        return value or ""

    def _read(self, path, protocol):
        attrs = {"scheme": protocol.value, "filename": path}
        try:
            return self.filesystem.read(path)
        except OSError as e:
            raise ParseError(f"failed to load secret from file '{path}': {e.strerror or e}",
                             attrs=attrs, error=e) from e

    def _fetch(self, name, timeout):
        logging.getLogger(__name__).debug(f"Fetching secret {name} from secret store")
        return self.secret_store.fetch(name, timeout=timeout)

    # credentials

    def _raw_credentials(self, payload, timeout):
        return _split_pair(payload, "credentials must be formatted as username:password",
                           {"scheme": Protocol.RAW.value})

    def _base64_credentials(self, payload, timeout):
        attrs = {"scheme": Protocol.BASE64.value}
        data = _text(_b64decode(payload, "credentials", attrs), "decoded credentials", attrs)
        return _split_pair(data, "decoded credentials must be formatted as username:password",
                           attrs)

    def _env_names(self, payload, protocol):
        return _split_pair(payload,
                           "credentials must be formatted as USERNAME_ENV_VAR:PASSWORD_ENV_VAR",
                           {"scheme": protocol.value, "credentials": payload})

    def _env_credentials(self, payload, timeout):
        user_var, pass_var = self._env_names(payload, Protocol.ENV)
        return self._getenv(user_var), self._getenv(pass_var)

    def _env_base64_credentials(self, payload, timeout):
        user_var, pass_var = self._env_names(payload, Protocol.ENV_BASE64)
        fields = []
        for what, name in (("username", user_var), ("password", pass_var)):
            attrs = {"scheme": Protocol.ENV_BASE64.value, "credentials": payload, "variable": name}
            data = _b64decode(self._getenv(name), f"{what} from environment credentials", attrs)
            fields.append(_text(data, what, attrs))
        return fields[0], fields[1]

    def _file_credentials(self, payload, timeout):
        attrs = {"scheme": Protocol.FILE.value, "filename": payload}
        contents = _text(self._read(payload, Protocol.FILE), f"file '{payload}'", attrs)
        kind = _structured_kind(payload)
        if kind:
            return _load_structured(contents, kind, f"file '{payload}'", attrs)
        return _split_pair(contents.strip(),
                           f"credentials in file '{payload}' must be formatted as username:password",
                           attrs)

    def _file_base64_credentials(self, payload, timeout):
        attrs = {"scheme": Protocol.FILE_BASE64.value, "filename": payload}
        contents = _text(self._read(payload, Protocol.FILE_BASE64), f"file '{payload}'", attrs)
        kind = _structured_kind(payload)
        if not kind:
            data = _text(_b64decode(contents.strip(), f"credentials file '{payload}'", attrs),
                         f"decoded file '{payload}'", attrs)
            return _split_pair(data,
                               f"decoded credentials in file '{payload}' must be formatted as "
                               f"username:password",
                               attrs)
        encoded = _load_structured(contents, kind, f"file '{payload}'", attrs)
        fields = []
        for what, value in zip(("username", "password"), encoded):
            data = _b64decode(value, f"{what} from credentials file '{payload}'", attrs)
            fields.append(_text(data, what, attrs))
        return fields[0], fields[1]

    def _secret_store_credentials(self, payload, timeout):
        attrs = {"scheme": Protocol.SECRET_STORE.value, "secret_name": payload}
        stored = self._fetch(payload, timeout)
        if stored.string_value is None:
            raise _wrong_shape(payload, "a string", attrs)
        return _load_structured(stored.string_value, "json", f"secret '{payload}'", attrs)

    # generic

    def _raw_generic(self, payload, timeout):
        return payload.encode("UTF-8")

    def _base64_generic(self, payload, timeout):
        return _b64decode(payload, "secret data", {"scheme": Protocol.BASE64.value})

    def _env_generic(self, payload, timeout):
        return self._getenv(payload).encode("UTF-8")

    def _env_base64_generic(self, payload, timeout):
        return _b64decode(self._getenv(payload),
                          f"secret data from environment variable '{payload}'",
                          {"scheme": Protocol.ENV_BASE64.value, "variable": payload})

    def _file_generic(self, payload, timeout):
        return self._read(payload, Protocol.FILE)

    def _file_base64_generic(self, payload, timeout):
        contents = self._read(payload, Protocol.FILE_BASE64)
        return _b64decode(contents.strip(), f"secret data from file '{payload}'",
                          {"scheme": Protocol.FILE_BASE64.value, "filename": payload})

    def _secret_store_generic(self, payload, timeout):
        attrs = {"scheme": Protocol.SECRET_STORE.value, "secret_name": payload}
        stored = self._fetch(payload, timeout)
        if stored.string_value is None:
            raise _wrong_shape(payload, "a string", attrs)
        return stored.string_value.encode("UTF-8")

    def _secret_store_binary_generic(self, payload, timeout):
        attrs = {"scheme": Protocol.SECRET_STORE_BINARY.value, "secret_name": payload}
        stored = self._fetch(payload, timeout)
        if stored.binary_value is None:
            raise _wrong_shape(payload, "binary data", attrs)
        return stored.binary_value


def _structured_kind(path):
    lowered = path.lower()
    for extension, kind in _STRUCTURED_EXTENSIONS.items():
        if lowered.endswith(extension):
            return kind
    return None


def _wrong_shape(name, shape, attrs):
    return ProviderError(f"secret '{name}' does not appear to be {shape}",
                         attrs=dict(attrs, reason="wrong-shape"))


_default_resolver = None


def default_resolver():
    """The process wide resolver reading the real environment, filesystem and GCP."""
    global _default_resolver
    if _default_resolver is None:
        _default_resolver = SecretResolver()
    return _default_resolver


def parse_username_password_secret(secret, timeout=None):
    return default_resolver().resolve_credentials(secret, timeout=timeout)


def parse_generic_secret(secret, timeout=None):
    return default_resolver().resolve_generic(secret, timeout=timeout)
