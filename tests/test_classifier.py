import re

import pytest

import classifier
from classifier import EmptyInputError, classify
from formats import PartnerFormat

EVM_HASH = "0x5c504ed432cb51138bcf09aa5e8a410dd4a1e204ef84bfed1be16dfba1b22060"
BITCOIN_HASH = "f4184fc596403b9d638783cf57adfe4c75c605f6356fbc91338530e9831e9e16"
SOLANA_SIG = ("5VERv8NMvzbJMEkV8xnrLkEaWRtSz9Co" * 3)[:88]
ORDER_UUID = "5a062495-c006-4e91-b243-f5c9880079a7"


def _keys(result):
    return [match.key for match in result.partners]


def test_evm_hash_is_chain_transaction():
    result = classify(EVM_HASH)

    assert result.is_chain_transaction is True
    assert result.chain.chain_key == "evm"
    assert result.chain.raw_input == EVM_HASH
    assert result.chain.explorer_url == f"https://blockscan.com/tx/{EVM_HASH}"
    assert result.partners == ()
    assert result.count == 0


def test_evm_hash_is_case_insensitive():
    upper = "0x" + EVM_HASH[2:].upper()
    assert classify(upper).chain.chain_key == "evm"


def test_bare_64_hex_is_bitcoin_not_evm():
    for value in (BITCOIN_HASH, BITCOIN_HASH.upper()):
        result = classify(value)
        assert result.is_chain_transaction is True
        assert result.chain.chain_key == "bitcoin"
        assert result.chain.explorer_url == f"https://www.blockchain.com/btc/tx/{value}"


@pytest.mark.parametrize("length", [87, 88])
def test_base58_signature_is_solana(length):
    signature = SOLANA_SIG[:length]
    result = classify(signature)

    assert result.chain.chain_key == "solana"
    assert result.chain.explorer_url == f"https://solscan.io/tx/{signature}"


@pytest.mark.parametrize("bad_char", ["0", "O", "I", "l"])
def test_non_base58_characters_are_not_solana(bad_char):
    signature = bad_char + SOLANA_SIG[1:]
    result = classify(signature)

    assert result.is_chain_transaction is False
    assert result.partners == ()


def test_chain_match_short_circuits_partner_matching():
    catch_all = PartnerFormat(
        key="anything",
        display_name="Anything",
        pattern=re.compile(r".+"),
        url_template="https://example.com/",
        description="Matches every input",
    )

    result = classify(EVM_HASH, partners=(catch_all,))

    assert result.is_chain_transaction is True
    assert result.partners == ()


def test_banxa_numeric_id_matches_only_banxa():
    result = classify("17258381")

    assert _keys(result) == ["banxa"]
    assert result.partners[0].tracking_url == "https://edge3.banxa.com/status/17258381"
    assert result.partners[0].display_name == "Banxa"


@pytest.mark.parametrize("order_id", ["PB25014430124TX8", "pb25014430124tx8"])
def test_paybis_uses_static_url(order_id):
    result = classify(order_id)

    assert _keys(result) == ["paybis"]
    assert result.partners[0].tracking_url == "https://payb.is"
    assert result.partners[0].note


def test_fourteen_char_id_is_ambiguous_between_exchanges():
    result = classify("1234567890abcd")

    assert _keys(result) == ["changenow", "letsexchange"]
    assert result.count == 2
    assert result.partners[0].tracking_url == "https://changenow.io/exchange/1234567890abcd"
    assert result.partners[1].tracking_url == "https://letsexchange.io/exchange/1234567890abcd"


def test_uuid_matches_every_uuid_partner_with_concatenated_urls():
    result = classify(ORDER_UUID)

    assert _keys(result) == ["moonpay", "simplex", "bity"]
    urls = {match.key: match.tracking_url for match in result.partners}
    assert urls["moonpay"] == f"https://buy.moonpay.com/transaction_receipt?transactionId={ORDER_UUID}"
    assert urls["simplex"] == f"https://payment-status.simplex.com/#/{ORDER_UUID}"
    assert urls["bity"] == f"https://go.bity.com/order-status?reference={ORDER_UUID}"


@pytest.mark.parametrize("raw", ["", "   ", "\t\n", None])
def test_blank_input_raises_empty_input(raw):
    with pytest.raises(EmptyInputError) as excinfo:
        classify(raw)
    assert excinfo.value.code == "empty_input"


def test_unknown_input_is_empty_successful_result():
    result = classify("not-an-id")

    assert result.is_chain_transaction is False
    assert result.chain is None
    assert result.partners == ()


def test_input_is_trimmed_before_matching():
    result = classify("  17258381\n")

    assert result.input == "17258381"
    assert _keys(result) == ["banxa"]


def test_full_match_rejects_partial_ids():
    assert classify("order 17258381").partners == ()
    assert classify("172583810").partners == ()


def test_classify_is_idempotent():
    first = classify(ORDER_UUID)
    second = classify(ORDER_UUID)

    assert first == second
    assert first.to_json_dict() == second.to_json_dict()


def test_serialised_result_uses_camel_case_keys():
    payload = classify("17258381").to_json_dict()

    assert payload["isChainTransaction"] is False
    assert payload["count"] == 1
    assert payload["partners"][0]["displayName"] == "Banxa"
    assert payload["partners"][0]["trackingUrl"].endswith("17258381")


def test_match_partners_preserves_table_order():
    matches = classifier.match_partners(ORDER_UUID, reversed(classifier.formats.PARTNER_FORMATS))
    assert [match.key for match in matches] == ["bity", "simplex", "moonpay"]


@pytest.mark.parametrize(
    "value",
    [
        "１７２５８３８１",  # full-width digits
        "١٧٢٥٨٣٨١",  # Arabic-Indic digits
        "PB" + "\u212a" * 10,  # Kelvin sign folds to k
        "PB" + "\u017f" * 10,  # long s folds to s
    ],
)
def test_non_ascii_lookalikes_match_nothing(value):
    result = classify(value)

    assert result.is_chain_transaction is False
    assert result.partners == ()
