"""Tests for the App Store Connect client."""

import jwt
import pytest
import requests
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from protostats.providers.appstore import AppStoreClient, AppStoreError


class FakeResponse:
    def __init__(self, status_code=200, payload=None, reason="OK"):
        self.status_code = status_code
        self.reason = reason
        self._payload = payload or {}

    def json(self):
        return self._payload


class FakeSession:
    """Records requests and replays canned responses by URL suffix."""

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append((url, headers))
        for suffix, response in self.responses.items():
            if url.endswith(suffix):
                if isinstance(response, Exception):
                    raise response
                return response
        raise AssertionError(f"Unexpected URL: {url}")


@pytest.fixture(scope="module")
def key_pair():
    private_key = ec.generate_private_key(ec.SECP256R1())
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


def make_client(key_pair, session=None):
    private_pem, _ = key_pair
    return AppStoreClient(
        issuer_id="issuer-1",
        key_id="KEY123",
        private_key=private_pem,
        app_id="6753611139",
        session=session,
    )


APP_PAYLOAD = {"data": {"attributes": {"name": "ProtoQuiz", "bundleId": "com.ems.protoquiz"}}}


class TestGenerateToken:
    """Tests for bearer token signing."""

    def test_claims_and_headers(self, key_pair):
        _, public_pem = key_pair
        token = make_client(key_pair).generate_token(now=1_700_000_000)

        header = jwt.get_unverified_header(token)
        claims = jwt.decode(
            token,
            public_pem,
            algorithms=["ES256"],
            audience="appstoreconnect-v1",
            options={"verify_exp": False},
        )

        assert header["kid"] == "KEY123"
        assert header["alg"] == "ES256"
        assert claims["iss"] == "issuer-1"
        assert claims["iat"] == 1_700_000_000
        assert claims["exp"] - claims["iat"] == 20 * 60

    def test_current_token_verifies(self, key_pair):
        _, public_pem = key_pair
        token = make_client(key_pair).generate_token()
        claims = jwt.decode(token, public_pem, algorithms=["ES256"], audience="appstoreconnect-v1")
        assert claims["aud"] == "appstoreconnect-v1"


class TestFetchAppInfo:
    """Tests for app metadata lookup."""

    def test_app_info(self, key_pair):
        session = FakeSession(
            {
                "/apps/6753611139": FakeResponse(payload=APP_PAYLOAD),
                "/appStoreVersions": FakeResponse(payload={"data": [{}, {}, {}]}),
            }
        )

        info = make_client(key_pair, session).fetch_app_info()

        assert info.app_name == "ProtoQuiz"
        assert info.bundle_id == "com.ems.protoquiz"
        assert info.version_count == 3
        assert info.total_downloads is None
        assert session.calls[0][1]["Authorization"].startswith("Bearer ")

    def test_http_error(self, key_pair):
        session = FakeSession({"/apps/6753611139": FakeResponse(401, reason="Unauthorized")})

        with pytest.raises(AppStoreError, match="401"):
            make_client(key_pair, session).fetch_app_info()

    def test_network_error(self, key_pair):
        session = FakeSession({"/apps/6753611139": requests.ConnectionError("offline")})

        with pytest.raises(AppStoreError, match="request failed"):
            make_client(key_pair, session).fetch_app_info()

    def test_versions_unavailable(self, key_pair):
        session = FakeSession(
            {
                "/apps/6753611139": FakeResponse(payload=APP_PAYLOAD),
                "/appStoreVersions": FakeResponse(403, reason="Forbidden"),
            }
        )

        info = make_client(key_pair, session).fetch_app_info()

        assert info.app_name == "ProtoQuiz"
        assert info.version_count is None

    def test_camel_case_output(self, key_pair):
        session = FakeSession(
            {
                "/apps/6753611139": FakeResponse(payload=APP_PAYLOAD),
                "/appStoreVersions": FakeResponse(payload={"data": []}),
            }
        )
        info = make_client(key_pair, session).fetch_app_info()

        data = info.model_dump(mode="json", by_alias=True)

        assert data["appName"] == "ProtoQuiz"
        assert data["versionCount"] == 0
        assert data["totalDownloads"] is None


class TestFromKeyFile:
    def test_reads_key(self, key_pair, tmp_path):
        private_pem, _ = key_pair
        path = tmp_path / "AuthKey_KEY123.p8"
        path.write_text(private_pem)

        client = AppStoreClient.from_key_file("issuer-1", "KEY123", path, "1")

        assert client.private_key == private_pem

    def test_missing_key(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppStoreClient.from_key_file("issuer-1", "KEY123", tmp_path / "missing.p8", "1")
