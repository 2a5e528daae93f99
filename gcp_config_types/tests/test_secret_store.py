# -*- coding: utf-8 -*-
"""
Tests for the GCP Secret Manager backed secret store, the service client is mocked

"""
import logging
import unittest
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest import mock

import google.auth.exceptions
import google_crc32c
from google.api_core import exceptions

from gcp_config_types import *

PROJECT = "test-project"
SECRET = f"projects/{PROJECT}/secrets/db-password"


def setup_module():
    logging.basicConfig(level=logging.DEBUG)


def crc32c_of(data):
    crc32c = google_crc32c.Checksum()
    crc32c.update(data)
    return int(crc32c.hexdigest(), 16)


def version(number, age_minutes):
    return SimpleNamespace(
        name=f"{SECRET}/versions/{number}",
        create_time=datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=age_minutes))


def access_response(data, checksum=True):
    return SimpleNamespace(payload=SimpleNamespace(
        data=data,
        data_crc32c=crc32c_of(data) if checksum else 0))


class TestGCPSecretStore(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch("gcp_config_types.secret_store.secretmanager.SecretManagerServiceClient")
        self.client_class = patcher.start()
        self.addCleanup(patcher.stop)
        self.client = self.client_class.return_value
        self.client.list_secret_versions.return_value = [version(1, 0), version(3, 20), version(2, 10)]
        self.client.access_secret_version.return_value = access_response(b"dodgy secret 3")
        self.credentials = object()
        self.store = GCPSecretStore(_credentials_callback=lambda: (self.credentials, PROJECT))

    def accessed_version(self):
        return self.client.access_secret_version.call_args.kwargs["request"].name

    def test_latest_enabled_version(self):
        stored = self.store.fetch(SECRET)
        self.assertEqual(stored.string_value, "dodgy secret 3")
        self.assertEqual(stored.binary_value, b"dodgy secret 3")
        self.assertEqual(self.accessed_version(), f"{SECRET}/versions/3")

        list_request = self.client.list_secret_versions.call_args.kwargs["request"]
        self.assertEqual(list_request.parent, SECRET)
        self.assertEqual(list_request.filter, "state=ENABLED")
        self.client_class.assert_called_once_with(credentials=self.credentials)

    def test_latest_alias(self):
        self.store.fetch(f"{SECRET}/versions/latest")
        self.assertEqual(self.accessed_version(), f"{SECRET}/versions/3")

    def test_explicit_version(self):
        self.store.fetch(f"{SECRET}/versions/2")
        self.assertEqual(self.accessed_version(), f"{SECRET}/versions/2")

        # version 2 disabled so the newest enabled version before it is used
        self.client.list_secret_versions.return_value = [version(1, 0), version(3, 20)]
        self.store.fetch(f"{SECRET}/versions/2")
        self.assertEqual(self.accessed_version(), f"{SECRET}/versions/1")

    def test_short_name_uses_project(self):
        self.store.fetch("db-password")
        list_request = self.client.list_secret_versions.call_args.kwargs["request"]
        self.assertEqual(list_request.parent, SECRET)

        store = GCPSecretStore(project_id="other",
                               _credentials_callback=lambda: (self.credentials, PROJECT))
        store.fetch("db-password/versions/latest")
        list_request = self.client.list_secret_versions.call_args.kwargs["request"]
        self.assertEqual(list_request.parent, "projects/other/secrets/db-password")

    def test_no_project(self):
        store = GCPSecretStore(_credentials_callback=lambda: (self.credentials, None))
        with self.assertRaises(ProviderError) as ctx:
            store.fetch("db-password")
        self.assertEqual(ctx.exception.attrs["secret_name"], "db-password")

    def test_invalid_name(self):
        with self.assertRaises(ProviderError) as ctx:
            self.store.fetch("projects/p/secrets")
        self.assertEqual(ctx.exception.reason, "invalid-name")

    def test_no_enabled_versions(self):
        self.client.list_secret_versions.return_value = []
        with self.assertRaises(ProviderError) as ctx:
            self.store.fetch(SECRET)
        self.assertEqual(ctx.exception.reason, "not-found")
        self.client.access_secret_version.assert_not_called()

    def test_binary_payload(self):
        self.client.access_secret_version.return_value = access_response(b"\xff\xfe\x00")
        stored = self.store.fetch(SECRET)
        self.assertIsNone(stored.string_value)
        self.assertEqual(stored.binary_value, b"\xff\xfe\x00")

    def test_checksum(self):
        self.client.access_secret_version.return_value = access_response(b"no checksum", checksum=False)
        self.assertEqual(self.store.fetch(SECRET).binary_value, b"no checksum")

        self.client.access_secret_version.return_value = SimpleNamespace(
            payload=SimpleNamespace(data=b"tampered", data_crc32c=crc32c_of(b"original")))
        with self.assertRaises(ProviderError) as ctx:
            self.store.fetch(SECRET)
        self.assertEqual(ctx.exception.reason, "corrupted")

    def test_timeout_forwarded(self):
        self.store.fetch(SECRET, timeout=5.0)
        self.assertEqual(self.client.list_secret_versions.call_args.kwargs["timeout"], 5.0)
        self.assertEqual(self.client.access_secret_version.call_args.kwargs["timeout"], 5.0)

    def test_client_default_timeout_kept(self):
        self.store.fetch(SECRET)
        self.assertNotIn("timeout", self.client.list_secret_versions.call_args.kwargs)
        self.assertNotIn("timeout", self.client.access_secret_version.call_args.kwargs)

    def test_api_errors(self):
        cases = [(exceptions.DeadlineExceeded("deadline"), "canceled"),
                 (exceptions.Cancelled("cancelled"), "canceled"),
                 (exceptions.NotFound("missing"), "not-found"),
                 (exceptions.PermissionDenied("denied"), "auth"),
                 (exceptions.ServiceUnavailable("unavailable"), "provider")]
        for error, reason in cases:
            self.client.access_secret_version.side_effect = error
            with self.assertRaises(ProviderError) as ctx:
                self.store.fetch(SECRET)
            self.assertEqual(ctx.exception.reason, reason, f"{type(error).__name__} misclassified")
            self.assertIs(ctx.exception.error, error)
            self.assertEqual(ctx.exception.attrs["secret_name"], SECRET)

    def test_credentials_error(self):
        def no_credentials():
            raise google.auth.exceptions.DefaultCredentialsError("no credentials")

        store = GCPSecretStore(_credentials_callback=no_credentials)
        with self.assertRaises(ProviderError) as ctx:
            store.fetch(SECRET)
        self.assertEqual(ctx.exception.reason, "auth")

    def test_client_per_thread(self):
        import threading

        self.store.fetch(SECRET)
        thread = threading.Thread(target=self.store.fetch, args=[SECRET])
        thread.start()
        thread.join()
        self.assertEqual(self.client_class.call_count, 2)

    def test_resolver_uses_store(self):
        self.client.access_secret_version.return_value = access_response(
            b'{"username": "bob", "password": "password"}')
        resolver = SecretResolver(environment=MappingEnvironment(), secret_store=self.store)
        creds = resolver.resolve_credentials(f"secretstore://{SECRET}")
        self.assertEqual(creds, UsernamePasswordSecret(username="bob", password="password"))

        self.client.access_secret_version.return_value = access_response(b"\x00\x01")
        secret = resolver.resolve_generic(f"secretstore+binary://{SECRET}/versions/3", timeout=1.0)
        self.assertEqual(secret.data, b"\x00\x01")
