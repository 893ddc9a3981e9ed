import pytest

import formats


def test_partner_keys_are_unique_and_ordered():
    assert formats.partner_keys() == (
        "banxa",
        "paybis",
        "moonpay",
        "simplex",
        "changenow",
        "letsexchange",
        "bity",
    )


def test_chain_priority_order():
    assert formats.chain_keys() == ("evm", "bitcoin", "solana")


def test_lookup_by_key():
    assert formats.get_partner("bity").display_name == "Bity"
    assert formats.get_chain("solana").case_sensitive is True
    assert formats.get_partner("evm") is None
    assert formats.get_chain("banxa") is None


def test_is_known_key_covers_both_tables():
    assert formats.is_known_key("moonpay")
    assert formats.is_known_key("bitcoin")
    assert not formats.is_known_key("coinbase")


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        formats.PARTNERS_BY_KEY["coinbase"] = formats.PARTNER_FORMATS[0]  # type: ignore[index]

    with pytest.raises(AttributeError):
        formats.PARTNER_FORMATS[0].url_template = "https://example.com/"  # type: ignore[misc]


def test_static_url_override_is_per_entry():
    overridden = [partner.key for partner in formats.PARTNER_FORMATS if partner.static_url]
    assert overridden == ["paybis"]
    assert formats.get_partner("paybis").tracking_url("PB25014430124TX8") == "https://payb.is"
    assert formats.get_partner("banxa").tracking_url("123456") == "https://edge3.banxa.com/status/123456"


def test_duplicate_keys_are_rejected():
    banxa = formats.get_partner("banxa")
    with pytest.raises(ValueError):
        formats._index((banxa, banxa))
