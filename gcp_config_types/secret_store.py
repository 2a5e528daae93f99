# -*- coding: utf-8 -*-
"""Secret store lookups backed by GCP Secret Manager.

Note this does not simply read the "latest" alias. It takes the most recent
*enabled* version, so rolling back is done by disabling the newest version.
If a version number is given the selected version is the most recent enabled
version created at or before it. Version numbers always increment so the
highest enabled number not above the requested one is also the newest.
"""

import logging
import re
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import google.auth
import google.auth.exceptions
import google_crc32c
from google.api_core import exceptions
from google.cloud import secretmanager, secretmanager_v1

from .exceptions import ProviderError

_FULL_NAME = re.compile(r'^(projects/[^/]+/secrets/[^/]+)(?:/versions/([0-9]+|latest))?$')
_SHORT_NAME = re.compile(r'^([^/]+)(?:/versions/([0-9]+|latest))?$')
_VERSION_NUMBER = re.compile(r'projects/[^/]+/secrets/[^/]+/versions/([0-9]+)')

CANCELED_EXCEPTIONS = (exceptions.DeadlineExceeded,
                       exceptions.Cancelled)
AUTH_EXCEPTIONS = (exceptions.PermissionDenied,
                   exceptions.Unauthenticated,
                   google.auth.exceptions.GoogleAuthError)


def _call_options(timeout):
    # leave the client default retry/timeout in place unless the caller sets one
    return {"timeout": timeout} if timeout is not None else {}


@dataclass(frozen=True)
class StoredSecret:
    string_value: Optional[str] = None
    binary_value: Optional[bytes] = None

    def __repr__(self):
        return "StoredSecret(<hidden>)"


class SecretStore(ABC):
    """A named secret lookup service."""

    @abstractmethod
    def fetch(self, name, timeout=None):
        """
        Fetch the named secret.

        :type name: str
        :param name: The secret identifier understood by the store

        :type timeout: float
        :param timeout: Seconds to wait for the store before giving up

        :return: StoredSecret
        :raises ProviderError: on lookup, auth or not-found failures
        """
        return None


class GCPSecretStore(SecretStore):
    """Reads secrets from GCP Secret Manager.

    Clients and credentials are created per thread so a single store can be
    shared by concurrent resolvers.
    """

    def __init__(self, project_id=None, _credentials_callback=None):
        """
        :type project_id: str
        :param project_id: Project used for bare secret names, defaults to the
            project of the application default credentials

        :type _credentials_callback: callable
        :param _credentials_callback: returns a (credentials, project_id) tuple,
            defaults to google.auth.default
        """
        self._project_id = project_id
        self._credentials_callback = _credentials_callback
        self.ns = threading.local()

    def _load_credentials(self):
        if not hasattr(self.ns, "_credentials"):
            if self._credentials_callback is not None:
                _credentials, _project_id = self._credentials_callback()
            else:
                _credentials, _project_id = google.auth.default()
            self.ns._credentials = _credentials
            self.ns._project_id = _project_id
        return self.ns._credentials, self.ns._project_id

    def _client(self):
        if not hasattr(self.ns, "client"):
            _credentials, _ = self._load_credentials()
            self.ns.client = secretmanager.SecretManagerServiceClient(credentials=_credentials)
        return self.ns.client

    def _split_name(self, name):
        match = _FULL_NAME.match(name)
        if match:
            secret_name, version = match.group(1), match.group(2)
        else:
            match = _SHORT_NAME.match(name)
            if not match:
                raise ProviderError(f"'{name}' is not a valid secret name",
                                    attrs={"secret_name": name, "reason": "invalid-name"})
            project_id = self._project_id
            if not project_id:
                _, project_id = self._load_credentials()
            if not project_id:
                raise ProviderError(f"no project available to resolve secret '{name}'",
                                    attrs={"secret_name": name, "reason": "invalid-name"})
            secret_name = f"projects/{project_id}/secrets/{match.group(1)}"
            version = match.group(2)

        if version == "latest":
            version = None
        return secret_name, int(version) if version is not None else None

    def _latest_enabled_version(self, secret_name, max_version, timeout):
        request = secretmanager_v1.ListSecretVersionsRequest(
            parent=secret_name,
            filter="state=ENABLED"
        )
        page_result = self._client().list_secret_versions(request=request, **_call_options(timeout))
        latest = None
        for response in sorted(page_result, key=lambda d: d.create_time):
            if max_version is not None:
                version_num = int(_VERSION_NUMBER.search(response.name).group(1))
                if version_num > max_version:
                    continue
            latest = response
        return latest

    def fetch(self, name, timeout=None):
        try:
            secret_name, max_version = self._split_name(name)
            latest = self._latest_enabled_version(secret_name, max_version, timeout)
            if not latest:
                raise ProviderError(f"secret '{name}' has no active enabled versions",
                                    attrs={"secret_name": name, "reason": "not-found"})
            logging.getLogger(__name__).debug(f"Using version {latest.name} of secret {name}")

            request = secretmanager_v1.AccessSecretVersionRequest(
                name=latest.name
            )
            payload = self._client().access_secret_version(request=request,
                                                           **_call_options(timeout)).payload
        except ProviderError:
            raise
        except CANCELED_EXCEPTIONS as e:
            raise ProviderError(f"request for secret '{name}' was canceled: {e}",
                                attrs={"secret_name": name, "reason": "canceled"},
                                error=e) from e
        except exceptions.NotFound as e:
            raise ProviderError(f"secret '{name}' was not found: {e}",
                                attrs={"secret_name": name, "reason": "not-found"},
                                error=e) from e
        except AUTH_EXCEPTIONS as e:
            raise ProviderError(f"not authorized to read secret '{name}': {e}",
                                attrs={"secret_name": name, "reason": "auth"},
                                error=e) from e
        except exceptions.GoogleAPIError as e:
            logging.getLogger(__name__).warning(f"Secret Manager call failed for {name}")
            raise ProviderError(f"failed to get secret '{name}': {e}",
                                attrs={"secret_name": name, "reason": "provider"},
                                error=e) from e

        data = payload.data
        if payload.data_crc32c:
            crc32c = google_crc32c.Checksum()
            crc32c.update(data)
            if payload.data_crc32c != int(crc32c.hexdigest(), 16):
                raise ProviderError(f"secret '{name}' payload failed checksum verification",
                                    attrs={"secret_name": name, "reason": "corrupted"})

        try:
            string_value = data.decode("UTF-8")
        except UnicodeDecodeError:
            string_value = None
        return StoredSecret(string_value=string_value, binary_value=data)
