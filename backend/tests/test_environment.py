import pytest

from campusqa.core.environment import (
    mask_database_url,
    validate_on_startup,
    validate_required_env_vars,
)


@pytest.fixture
def production_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://forum:s3cret@db:5432/campusqa")
    monkeypatch.setenv("LLM_PROVIDER", "openai")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("CORS_ORIGINS", "https://forum.example.edu")
    for name in ("APPROVAL_THRESHOLD", "SIMILARITY_THRESHOLD", "RETRIEVAL_TOP_K"):
        monkeypatch.delenv(name, raising=False)


class TestValidateRequiredEnvVars:

    def test_valid_configuration(self, production_env):
        is_valid, errors = validate_required_env_vars()
        assert is_valid, errors

    def test_missing_provider_key(self, production_env, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY")

        is_valid, errors = validate_required_env_vars()

        assert not is_valid
        assert any("OPENAI_API_KEY" in e for e in errors)

    def test_rejects_non_postgres_url(self, production_env, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///forum.db")

        _, errors = validate_required_env_vars()

        assert any("PostgreSQL" in e for e in errors)

    @pytest.mark.parametrize("name,value", [
        ("APPROVAL_THRESHOLD", "0"),
        ("APPROVAL_THRESHOLD", "five"),
        ("SIMILARITY_THRESHOLD", "1.5"),
        ("SIMILARITY_THRESHOLD", "0"),
        ("RETRIEVAL_TOP_K", "0"),
    ])
    def test_rejects_bad_thresholds(self, production_env, monkeypatch, name, value):
        monkeypatch.setenv(name, value)

        is_valid, errors = validate_required_env_vars()

        assert not is_valid
        assert any(name in e for e in errors)

    def test_default_password_in_production(self, production_env, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://postgres:postgres@db:5432/campusqa")

        _, errors = validate_required_env_vars()

        assert any("Default database password" in e for e in errors)

    def test_validate_on_startup_raises(self, production_env, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "cohere")

        with pytest.raises(ValueError, match="Unsupported LLM_PROVIDER"):
            validate_on_startup()


def test_mask_database_url():
    assert mask_database_url("postgresql://forum:s3cret@db:5432/campusqa") == "postgresql://forum:****@db:5432/campusqa"
    assert mask_database_url("") == "not set"
