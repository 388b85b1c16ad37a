import pytest

from chartdesk.config import Settings, load_chart_config, settings_from_config


ENV_VARS = [
    "CHARTDESK_SMA_PERIOD",
    "CHARTDESK_EMA_PERIOD",
    "CHARTDESK_BOLLINGER_PERIOD",
    "CHARTDESK_BOLLINGER_K",
    "CHARTDESK_RSI_PERIOD",
    "CHARTDESK_CACHE_THROTTLE_MS",
    "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettingsFromEnv:
    def test_defaults(self, clean_env) -> None:
        s = Settings.from_env()
        assert (s.sma_period, s.ema_period, s.bollinger_period, s.rsi_period) == (50, 20, 20, 14)
        assert s.bollinger_k == 2.0
        assert s.cache_throttle_ms == 200
        assert s.log_level == "INFO"

    def test_reads_environment(self, clean_env) -> None:
        clean_env.setenv("CHARTDESK_SMA_PERIOD", "100")
        clean_env.setenv("CHARTDESK_BOLLINGER_K", "2.5")
        clean_env.setenv("CHARTDESK_CACHE_THROTTLE_MS", "250")
        clean_env.setenv("LOG_LEVEL", "DEBUG")

        s = Settings.from_env()
        assert s.sma_period == 100
        assert s.bollinger_k == 2.5
        assert s.cache_throttle_ms == 250
        assert s.log_level == "DEBUG"

    def test_blank_value_uses_default(self, clean_env) -> None:
        clean_env.setenv("CHARTDESK_RSI_PERIOD", "  ")
        assert Settings.from_env().rsi_period == 14

    def test_invalid_number(self, clean_env) -> None:
        clean_env.setenv("CHARTDESK_EMA_PERIOD", "twenty")
        with pytest.raises(ValueError, match="CHARTDESK_EMA_PERIOD must be an integer"):
            Settings.from_env()


class TestValidation:
    def test_defaults_are_valid(self) -> None:
        Settings().validate()

    def test_lists_every_bad_value(self) -> None:
        s = Settings(sma_period=0, bollinger_k=-1.0, cache_throttle_ms=-5)
        with pytest.raises(ValueError) as exc:
            s.validate()
        msg = str(exc.value)
        assert "sma_period=0" in msg
        assert "bollinger_k=-1.0" in msg
        assert "cache_throttle_ms=-5" in msg
        assert "rsi_period" not in msg

    @pytest.mark.parametrize(
        "overrides, bad",
        [
            ({"bollinger_k": "wide"}, "bollinger_k='wide'"),
            ({"bollinger_k": None}, "bollinger_k=None"),
            ({"bollinger_k": True}, "bollinger_k=True"),
            ({"cache_throttle_ms": "200"}, "cache_throttle_ms='200'"),
            ({"cache_throttle_ms": 1.5}, "cache_throttle_ms=1.5"),
            ({"sma_period": True}, "sma_period=True"),
            ({"rsi_period": 14.0}, "rsi_period=14.0"),
        ],
    )
    def test_rejects_wrong_types(self, overrides, bad) -> None:
        with pytest.raises(ValueError) as exc:
            Settings().with_overrides(overrides).validate()
        assert bad in str(exc.value)

    def test_float_band_width_accepted(self) -> None:
        Settings(bollinger_k=1.5).validate()
        Settings(bollinger_k=3).validate()

    def test_with_overrides(self) -> None:
        base = Settings()
        s = base.with_overrides({"rsi_period": 21})
        assert s.rsi_period == 21
        assert base.rsi_period == 14

    def test_with_overrides_rejects_unknown_keys(self) -> None:
        with pytest.raises(ValueError, match="Unknown settings: rsi_lenght"):
            Settings().with_overrides({"rsi_lenght": 21})


class TestChartConfig:
    def test_load(self, tmp_path) -> None:
        path = tmp_path / "chart.yaml"
        path.write_text("indicators:\n  sma_period: 30\n")
        assert load_chart_config(path) == {"indicators": {"sma_period": 30}}

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_chart_config(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(ValueError, match="Empty config file"):
            load_chart_config(path)

    def test_invalid_yaml(self, tmp_path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("indicators: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_chart_config(path)

    def test_settings_from_config(self, tmp_path) -> None:
        path = tmp_path / "chart.yaml"
        path.write_text("indicators:\n  rsi_period: 21\n  bollinger_k: 3\n")

        s = settings_from_config(path, base=Settings())
        assert s.rsi_period == 21
        assert s.bollinger_k == 3
        assert s.sma_period == 50

    def test_settings_from_config_validates(self, tmp_path) -> None:
        path = tmp_path / "chart.yaml"
        path.write_text("indicators:\n  ema_period: 0\n")
        with pytest.raises(ValueError, match="ema_period=0"):
            settings_from_config(path, base=Settings())

    def test_indicators_section_must_be_mapping(self, tmp_path) -> None:
        path = tmp_path / "chart.yaml"
        path.write_text("indicators:\n  - sma\n")
        with pytest.raises(ValueError, match="must be a mapping"):
            settings_from_config(path, base=Settings())

    def test_config_without_indicators_section(self, tmp_path) -> None:
        path = tmp_path / "chart.yaml"
        path.write_text("chart: {}\n")
        assert settings_from_config(path, base=Settings()) == Settings()
