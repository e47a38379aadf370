from accountech.config import AppConfig, load_config, save_config


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(str(tmp_path / "absent.yaml"))

    assert config.voucher.number_width == 4
    assert config.voucher.balance_tolerance == 0.01
    assert config.tax.components == ["CGST", "SGST"]


def test_yaml_values_override_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("voucher:\n  number_width: 6\ntax:\n  rate: 5\n", encoding="utf-8")

    config = load_config(str(path))
    assert config.voucher.number_width == 6
    assert config.voucher.prefix_length == 2
    assert config.tax.rate == 5.0


def test_environment_wins_over_yaml(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("voucher:\n  number_width: 6\n  recent_limit: 20\n", encoding="utf-8")
    monkeypatch.setenv("ACCOUNTECH_VOUCHER__NUMBER_WIDTH", "5")

    config = load_config(str(path))
    assert config.voucher.number_width == 5
    assert config.voucher.recent_limit == 20


def test_save_and_reload(tmp_path):
    path = str(tmp_path / "config.yaml")
    config = AppConfig()
    config.voucher.max_number_retries = 7
    save_config(config, path)

    assert load_config(path).voucher.max_number_retries == 7
