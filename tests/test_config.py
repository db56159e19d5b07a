from ibm_key_protect.config import Settings, env_prefix, get_settings


class TestSettings:
    def test_env_prefix(self):
        assert env_prefix("ibm_key_protect_api") == "IBM_KEY_PROTECT_API_"
        assert env_prefix("my-kms") == "MY_KMS_"

    def test_defaults(self, monkeypatch):
        for name in ("URL", "AUTH_TYPE", "DISABLE_SSL", "ENABLE_RETRIES", "MAX_RETRIES", "RETRY_INTERVAL", "LOG_LEVEL"):
            monkeypatch.delenv(f"IBM_KEY_PROTECT_API_{name}", raising=False)

        settings = get_settings()

        assert settings.url is None
        assert settings.auth_type == "bearertoken"
        assert settings.disable_ssl is False
        assert settings.enable_retries is False
        assert settings.max_retries == 4
        assert settings.retry_interval == 30
        assert settings.log_level == "WARNING"

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("MY_KMS_URL", "https://kms.example")
        monkeypatch.setenv("MY_KMS_MAX_RETRIES", "7")
        monkeypatch.setenv("MY_KMS_LOG_LEVEL", "debug")

        settings = get_settings("my-kms")

        assert isinstance(settings, Settings)
        assert settings.url == "https://kms.example"
        assert settings.max_retries == 7
        assert settings.log_level == "debug"

    def test_cached_per_service_name(self, monkeypatch):
        monkeypatch.setenv("MY_KMS_URL", "https://kms.example")

        assert get_settings("my-kms") is get_settings("my-kms")
        assert get_settings("my-kms") is not get_settings("other")
