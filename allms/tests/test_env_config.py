from __future__ import annotations

import json

from allms.config import CONFIG_FILE_ENV, DEFAULTS, get_provider_config, reset_config_cache
from allms.config.env import get_env_var_candidates, is_placeholder, resolve_provider_key


def test_defaults_without_environment():
    cfg = get_provider_config("openai")

    assert cfg == DEFAULTS["openai"]  # nosec B101
    assert "api_key" not in cfg  # nosec B101


def test_env_credential_and_placeholder_skipping(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "your_openai_key_here")
    assert "api_key" not in get_provider_config("openai")  # nosec B101

    monkeypatch.setenv("OPENAI_API_KEY", "sk-real")
    assert get_provider_config("openai")["api_key"] == "sk-real"  # nosec B101


def test_alias_credentials(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "gem-key")
    assert get_provider_config("google")["api_key"] == "gem-key"  # nosec B101
    assert resolve_provider_key("google") == ("gem-key", "GEMINI_API_KEY")  # nosec B101
    assert list(get_env_var_candidates("azure")) == ["AZURE_OPENAI_API_KEY", "AZURE_API_KEY"]  # nosec B101

    monkeypatch.setenv("AWS_BEARER_TOKEN_BEDROCK", "aws-token")
    assert get_provider_config("bedrock")["api_key"] == "aws-token"  # nosec B101


def test_vendor_setting_names_win_over_generic(monkeypatch):
    monkeypatch.setenv("AZURE_BASE_URL", "https://generic.openai.azure.com")
    monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "https://vendor.openai.azure.com")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "eu-west-1")

    assert get_provider_config("azure")["base_url"] == "https://vendor.openai.azure.com"  # nosec B101
    assert get_provider_config("bedrock")["region"] == "eu-west-1"  # nosec B101


def test_config_file_env_and_overrides_precedence(monkeypatch, tmp_path):
    path = tmp_path / "allms.yaml"
    path.write_text(
        "anthropic:\n"
        "  api_key: ${ANTHROPIC_TOKEN_FOR_TESTS}\n"
        "  base_url: https://proxy.internal/anthropic/v1/messages\n"
        "  api_version: 2023-01-01\n"
        "mistral:\n"
        "  base_url: https://file.mistral/v1/chat/completions\n",
        encoding="utf-8",
    )
    monkeypatch.setenv(CONFIG_FILE_ENV, str(path))
    monkeypatch.setenv("ANTHROPIC_TOKEN_FOR_TESTS", "sk-ant-file")
    monkeypatch.setenv("MISTRAL_API_URL", "https://env.mistral/v1/chat/completions")
    reset_config_cache()

    anthropic = get_provider_config("anthropic", {"api_version": "2023-06-01", "region": None})
    mistral = get_provider_config("mistral")

    assert anthropic["api_key"] == "sk-ant-file"  # nosec B101
    assert anthropic["base_url"] == "https://proxy.internal/anthropic/v1/messages"  # nosec B101
    assert anthropic["api_version"] == "2023-06-01"  # nosec B101
    assert "region" not in anthropic  # nosec B101
    assert mistral["base_url"] == "https://env.mistral/v1/chat/completions"  # nosec B101


def test_json_config_file(monkeypatch, tmp_path):
    path = tmp_path / "allms.json"
    path.write_text(json.dumps({"xai": {"base_url": "https://grok.proxy/v1/chat/completions"}}), encoding="utf-8")
    monkeypatch.setenv(CONFIG_FILE_ENV, str(path))
    reset_config_cache()

    assert get_provider_config("grok")["base_url"] == "https://grok.proxy/v1/chat/completions"  # nosec B101


def test_vertex_uses_access_token(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "studio-key")
    monkeypatch.setenv("GOOGLE_PROJECT_ID", "acme-prod")
    monkeypatch.setenv("GOOGLE_VERTEX_TOKEN", "ya29.token")

    cfg = get_provider_config("vertex")

    assert cfg["project_id"] == "acme-prod"  # nosec B101
    assert cfg["api_key"] == "ya29.token"  # nosec B101


def test_dotenv_fills_unset_variables(monkeypatch, tmp_path):
    dotenv = tmp_path / ".env"
    dotenv.write_text("# comment\nexport DEEPSEEK_API_KEY='ds-from-file'\nBROKEN LINE\n", encoding="utf-8")
    monkeypatch.setenv("DOTENV_FILE", str(dotenv))
    reset_config_cache()

    assert get_provider_config("deepseek")["api_key"] == "ds-from-file"  # nosec B101


def test_is_placeholder():
    for value in ("placeholder", "CHANGEME", "sk-example-123", "your_key", " test_abc "):
        assert is_placeholder(value), value  # nosec B101
    for value in (None, "sk-live-abc", ""):
        assert not is_placeholder(value), value  # nosec B101
