from src.wedding_config.dtos import DEFAULT_CONFIG, ConfigValue
from src.wedding_config.parsing import config_to_rows, parse_config_rows


def test_no_rows_resolves_to_defaults():
    config = parse_config_rows({})

    assert config == DEFAULT_CONFIG
    assert config.plus_ones_enabled is False
    assert config.max_party_size == 1
    assert config.rsvp_enabled is True
    assert config.access_code_required_schedule is True
    assert config.notification_email_enabled is True
    assert config.notification_sms_enabled is False


def test_boolean_keys_require_literal_true():
    config = parse_config_rows({"plus_ones_enabled": "TRUE", "food_choices_enabled": "1"})

    assert config.plus_ones_enabled is False
    assert config.food_choices_enabled is False
    assert parse_config_rows({"plus_ones_enabled": "true"}).plus_ones_enabled is True


def test_default_true_keys_only_turn_off_on_literal_false():
    assert parse_config_rows({"rsvp_enabled": "no"}).rsvp_enabled is True
    assert parse_config_rows({"rsvp_enabled": "false"}).rsvp_enabled is False
    assert parse_config_rows({"access_code_enabled": "false"}).access_code_enabled is False


def test_numeric_keys_fall_back_when_unparseable():
    assert parse_config_rows({"max_party_size": "4"}).max_party_size == 4
    assert parse_config_rows({"max_party_size": "lots"}).max_party_size == 1


def test_undefined_sentinel_collapses_to_unset():
    config = parse_config_rows({"dress_code_message": "undefined", "rsvp_cutoff_timezone": "undefined"})

    assert config.dress_code_message is None
    assert config.rsvp_cutoff_timezone == "America/New_York"


def test_rows_round_trip_through_defaults():
    config = ConfigValue(plus_ones_enabled=True, max_party_size=6, rsvp_footer="See you there")

    assert parse_config_rows(config_to_rows(config)) == config
    assert "rsvp_cutoff_date" not in config_to_rows(config)
