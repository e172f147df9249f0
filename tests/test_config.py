from clipstore.config import DEFAULT_CONFIG, Config, load_config, parse_config


class TestDefaults:
    def test_default_values(self):
        assert DEFAULT_CONFIG == Config(
            poll_interval_ms=500,
            max_history_items=50,
            max_pins=50,
            max_entry_length=10000,
            max_age_days=30,
            cleanup_interval_sec=3600,
        )

    def test_max_age_seconds(self):
        assert Config(max_age_days=2).max_age_seconds == 2 * 86400


class TestParseConfig:
    def test_valid_override(self):
        assert parse_config("max_history_items=10").max_history_items == 10

    def test_zero_ignored(self):
        assert parse_config("max_history_items=0").max_history_items == 50

    def test_negative_ignored(self):
        assert parse_config("max_history_items=-5").max_history_items == 50

    def test_non_numeric_ignored(self):
        assert parse_config("max_history_items=abc").max_history_items == 50

    def test_comment_line_ignored(self):
        assert parse_config("# max_pins=5").max_pins == 50

    def test_indented_comment_ignored(self):
        assert parse_config("   # max_pins=5").max_pins == 50

    def test_whitespace_trimmed(self):
        config = parse_config("  max_age_days =  7  ")
        assert config.max_age_days == 7

    def test_all_keys(self):
        text = "\n".join(
            [
                "poll_interval_ms=250",
                "max_history_items=100",
                "max_pins=20",
                "max_entry_length=500",
                "max_age_days=14",
                "cleanup_interval_sec=60",
            ]
        )
        assert parse_config(text) == Config(250, 100, 20, 500, 14, 60)

    def test_unknown_key_ignored(self):
        assert parse_config("colour=blue\nmax_pins=4") == Config(max_pins=4)

    def test_line_without_equals_ignored(self):
        assert parse_config("max_pins 4") == DEFAULT_CONFIG

    def test_line_with_two_equals_ignored(self):
        assert parse_config("max_pins=4=5") == DEFAULT_CONFIG

    def test_blank_lines_ignored(self):
        assert parse_config("\n\n   \nmax_pins=9\n\n").max_pins == 9

    def test_invalid_value_keeps_previous_setting(self):
        config = parse_config("max_pins=9\nmax_pins=0")
        assert config.max_pins == 9

    def test_later_value_wins(self):
        assert parse_config("max_pins=9\nmax_pins=12").max_pins == 12

    def test_base_config_respected(self):
        base = Config(max_pins=7)
        assert parse_config("max_age_days=3", base=base) == Config(max_pins=7, max_age_days=3)


class TestLoadConfig:
    def test_missing_file_returns_defaults(self, tmp_path):
        assert load_config(tmp_path / "absent.conf") == DEFAULT_CONFIG

    def test_reads_file(self, tmp_path):
        path = tmp_path / "clipstore.conf"
        path.write_text("# comment\nmax_history_items = 10\nmax_pins=abc\n")
        config = load_config(path)
        assert config.max_history_items == 10
        assert config.max_pins == 50

    def test_unreadable_file_returns_defaults(self, tmp_path):
        path = tmp_path / "clipstore.conf"
        path.write_bytes(b"\xff\xfe max_pins=3")
        assert load_config(path) == DEFAULT_CONFIG
