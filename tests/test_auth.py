import os

import pytest

from setupbuildx.auth import CredentialSource, TLSMaterial, set_credentials

FULL_TLS = {
    "BUILDER_NODE_0_AUTH_TLS_CACERT": "foo",
    "BUILDER_NODE_0_AUTH_TLS_CERT": "foo",
    "BUILDER_NODE_0_AUTH_TLS_KEY": "foo",
}


@pytest.fixture
def creds_dir(tmp_path):
    return str(tmp_path / ".docker" / "buildx" / "certs")


class TestSetCredentials:

    @pytest.mark.parametrize("endpoint, driver, env, expected_files, expected_opts", [
        ("mycontext", "docker-container", {}, [], []),
        ("docker-container://mycontainer", "docker-container", {}, [], []),
        ("tcp://graviton2:1234", "remote", {}, [], []),
        (
            "tcp://graviton2:1234",
            "remote",
            FULL_TLS,
            ["cacert_graviton2-1234.pem", "cert_graviton2-1234.pem", "key_graviton2-1234.pem"],
            ["cacert", "cert", "key"],
        ),
        (
            "tcp://graviton2:1234",
            "docker-container",
            FULL_TLS,
            ["cacert_graviton2-1234.pem", "cert_graviton2-1234.pem", "key_graviton2-1234.pem"],
            [],
        ),
    ])
    def test_endpoints(self, creds_dir, endpoint, driver, env, expected_files, expected_opts):
        opts = set_credentials(creds_dir, 0, driver, endpoint, CredentialSource.from_env(env))
        assert opts == [
            f"{kind}={os.path.join(creds_dir, f'{kind}_graviton2-1234.pem')}" for kind in expected_opts
        ]
        for name in expected_files:
            assert os.path.isfile(os.path.join(creds_dir, name))

    def test_file_contents_and_partial_material(self, creds_dir):
        source = CredentialSource({1: TLSMaterial(cacert="-----BEGIN CERTIFICATE-----")})
        opts = set_credentials(creds_dir, 1, "remote", "tcp://10.0.0.5:2376", source)
        path = os.path.join(creds_dir, "cacert_10.0.0.5-2376.pem")
        assert opts == [f"cacert={path}"]
        with open(path) as f:
            assert f.read() == "-----BEGIN CERTIFICATE-----"
        assert not os.path.exists(os.path.join(creds_dir, "cert_10.0.0.5-2376.pem"))

    def test_endpoint_without_port(self, creds_dir):
        source = CredentialSource({0: TLSMaterial(key="k")})
        opts = set_credentials(creds_dir, 0, "remote", "tcp://buildkitd", source)
        assert opts == [f"key={os.path.join(creds_dir, 'key_buildkitd.pem')}"]

    def test_material_of_other_index_ignored(self, creds_dir):
        opts = set_credentials(creds_dir, 1, "remote", "tcp://graviton2:1234", CredentialSource.from_env(FULL_TLS))
        assert opts == []

    @pytest.mark.parametrize("endpoint", ["", "tcp://host:notaport", "unix:///var/run/docker.sock"])
    def test_ineligible_endpoints(self, creds_dir, endpoint):
        opts = set_credentials(creds_dir, 0, "remote", endpoint, CredentialSource.from_env(FULL_TLS))
        assert opts == []


class TestCredentialSource:

    def test_from_env(self):
        source = CredentialSource.from_env({
            "BUILDER_NODE_0_AUTH_TLS_CACERT": "ca0",
            "BUILDER_NODE_2_AUTH_TLS_KEY": "key2",
            "BUILDER_NODE_X_AUTH_TLS_KEY": "ignored",
            "BUILDER_NODE_1_AUTH_TOKEN": "ignored",
            "HOME": "/root",
        })
        assert source.get(0) == TLSMaterial(cacert="ca0")
        assert source.get(2) == TLSMaterial(key="key2")
        assert source.get(1).is_empty()
        assert sorted(source.materials) == [0, 2]
