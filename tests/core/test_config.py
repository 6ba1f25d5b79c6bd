"""
配置系统测试
"""
import pytest
from pydantic import ValidationError

from core.config import LLMSettings, LoggingSettings, Settings, ViewerSettings


class TestLLMSettings:
    """LLM 配置测试"""

    def test_defaults(self):
        llm = LLMSettings()
        assert llm.model == "gpt-4o"
        assert llm.timeout == 30.0
        assert llm.fallback_answer == "No answer provided"

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("LLM_MODEL", "gpt-4o-mini")
        monkeypatch.setenv("LLM_TIMEOUT", "5")
        llm = LLMSettings()
        assert llm.model == "gpt-4o-mini"
        assert llm.timeout == 5.0

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            LLMSettings(timeout=0)


class TestLoggingSettings:
    """日志配置测试"""

    def test_level_normalized(self):
        assert LoggingSettings(level="debug").level == "DEBUG"

    def test_invalid_level(self):
        with pytest.raises(ValidationError):
            LoggingSettings(level="verbose")


class TestViewerSettings:
    """查看器配置测试"""

    def test_defaults(self):
        viewer = ViewerSettings()
        assert viewer.atom_radius == 0.5
        assert viewer.bond_radius == 0.1
        assert viewer.bond_color == 0xCCCCCC
        assert viewer.window_size == (1024, 768)
        assert (viewer.bond_length_factor_min, viewer.bond_length_factor_max) == (0.5, 2.0)

    def test_factor_outside_slider_range(self):
        with pytest.raises(ValidationError):
            ViewerSettings(bond_length_factor=3.0)


class TestSettings:
    """主配置测试"""

    def test_default_settings(self):
        settings = Settings()
        assert settings.app_name == "MolView"
        assert settings.api_prefix == "/api"
        assert settings.seed_predefined is True

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            Settings(environment="testing")

    def test_cors_origin_list(self):
        settings = Settings(cors_origins="http://a.com, http://b.com,")
        assert settings.cors_origin_list == ["http://a.com", "http://b.com"]

    def test_display_config_hides_api_key(self):
        settings = Settings(llm=LLMSettings(api_key="sk-secret"))
        config = settings.display_config()
        assert config["llm_api_key_set"] is True
        assert "sk-secret" not in str(config)
