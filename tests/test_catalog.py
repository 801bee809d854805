import json
import logging

import pytest

from wallet_agent.catalog import load_catalog, load_offers
from wallet_agent.errors import CatalogFormatError
from wallet_agent.providers import JsonOfferProvider, merge_catalogs

RAW_OFFERS = [
    {
        "bank": "HDFC Bank",
        "cardTypes": ["Credit Card"],
        "offers": [
            {"card": "HDFC Millennia", "cashbackPercentAmazon": 5, "period": "Ongoing"},
            {
                "discountPercent": 10,
                "minSpend": 5000,
                "maxDiscountCredit": 1250,
                "maxDiscountEMI": 1500,
                "applicableOn": ["EMI", "Full Swipe"],
                "period": "1 Jan 2025 - 31 Jan 2025",
            },
        ],
    },
    {
        "bank": "Federal Bank",
        "cardTypes": ["Debit Card"],
        "offers": [{"discountPercent": 10, "minSpend": 5000, "maxDiscountDebit": 750}],
    },
    {
        "bank": "ICICI Bank",
        "cardTypes": ["Credit Card"],
        "offers": [
            {
                "card": "Amazon Pay ICICI CC",
                "benefits": "5% cashback for Prime members",
                "extra": "Unlimited cashback up to ₹500",
                "categories": ["Shopping"],
            },
            {"offerType": "Gift voucher on signup"},
            {"extra": "Flat ₹100 off on first order", "minSpend": 999},
            {"offerType": "Bonus Rewards", "details": "10X reward points"},
            {"details": "Special festive deal"},
        ],
    },
]


def test_offer_ids_use_bank_slug_and_running_counter():
    ids = [offer.offer_id for offer in load_offers(RAW_OFFERS)]
    assert ids == [
        "bank_offer_hdfc_bank_1",
        "bank_offer_hdfc_bank_2",
        "bank_offer_federal_bank_3",
        "bank_offer_icici_bank_4",
        "bank_offer_icici_bank_5",
        "bank_offer_icici_bank_6",
        "bank_offer_icici_bank_7",
        "bank_offer_icici_bank_8",
    ]


def test_hdfc_millennia_uses_amazon_rate():
    millennia = load_offers(RAW_OFFERS)[0]
    assert millennia.type == "cashback"
    assert millennia.value == 5
    assert millennia.value_type == "percentage"
    assert millennia.description == "5% cashback on Amazon"
    assert "Electronics" in millennia.category_affinity
    assert millennia.specific_card_type == "HDFC Millennia"
    assert millennia.period == "Ongoing"


def test_hdfc_millennia_falls_back_to_gift_card_rate():
    raw = [{"bank": "HDFC Bank", "cardTypes": ["Credit Card"], "offers": [{"card": "HDFC Millennia", "cashbackPercentGiftCard": 3}]}]
    offer = load_offers(raw)[0]
    assert offer.value == 3
    assert offer.description == "3% cashback on Gift Cards"
    assert offer.category_affinity == ("Shopping",)


def test_description_shows_min_spend_and_relevant_cap_but_not_period():
    offers = load_offers(RAW_OFFERS)
    assert offers[1].description == "10% off, min spend ₹5000, max discount ₹1250 (Credit)"
    assert offers[1].max_discount_emi == 1500
    assert offers[1].applicable_on == ("EMI", "Full Swipe")
    assert offers[2].description == "10% off, min spend ₹5000, max discount ₹750 (Debit)"
    assert "Jan" not in offers[1].description


def test_large_amounts_are_written_out_in_full():
    raw = [{"bank": "Axis Bank", "cardTypes": ["Credit Card"], "offers": [{"discountPercent": 5, "minSpend": 1000000, "maxDiscountCredit": 25000.5}]}]
    offer = load_offers(raw)[0]
    assert offer.description == "5% off, min spend ₹1000000, max discount ₹25000.5 (Credit)"


def test_emi_cap_is_not_shown_in_description():
    raw = [{"bank": "SBI Card", "cardTypes": ["Credit Card EMI"], "offers": [{"discountPercent": 7.5, "maxDiscountEMI": 1500, "maxDiscount": 1500, "applicableOn": ["EMI"]}]}]
    offer = load_offers(raw)[0]
    assert offer.description == "7.5% off"


def test_text_shaped_offers():
    offers = load_offers(RAW_OFFERS)
    cashback, voucher, flat, rewards, generic = offers[3:]

    assert cashback.type == "cashback"
    assert cashback.value == 5
    assert cashback.max_discount == 500
    assert cashback.category_affinity == ("Shopping",)
    assert cashback.description == "5% cashback for Prime members, max discount ₹500"

    assert voucher.type == "voucher"
    assert voucher.value == 0
    assert voucher.description == "Gift voucher on signup"

    assert flat.type == "flat_discount"
    assert flat.value == 100
    assert flat.value_type == "amount"
    assert flat.description == "Flat ₹100 off on first order, min spend ₹999"

    assert rewards.type == "bonus_reward"
    assert rewards.value_type == "points"

    assert generic.type == "other"
    assert generic.value == 0
    assert generic.description == "Special festive deal"


def test_catalog_metadata_is_kept_for_the_registry():
    offer = load_offers(RAW_OFFERS)[2]
    assert offer.bank == "Federal Bank"
    assert offer.card_types == ("Debit Card",)
    assert offer.source == "bank"


def test_malformed_records_are_skipped_with_warnings(caplog):
    raw = [
        "junk",
        {"offers": []},
        {"bank": "Axis Bank", "offers": "nope"},
        {"bank": "Kotak", "cardTypes": ["Credit Card"], "offers": [42, {"discountPercent": 5, "minSpend": "lots"}]},
    ]
    with caplog.at_level(logging.WARNING, logger="wallet_agent.catalog"):
        catalog = load_catalog(raw)

    assert [offer.offer_id for offer in catalog.offers] == ["bank_offer_kotak_1"]
    assert catalog.offers[0].min_spend is None
    assert catalog.offers[0].value == 5
    assert len(catalog.warnings) == 5
    assert catalog.warnings[-1].bank == "Kotak"
    assert "minSpend" in catalog.warnings[-1].message
    assert "minSpend" in caplog.text


def test_empty_offer_defaults_to_other():
    offer = load_offers([{"bank": "Yes Bank", "offers": [{}]}])[0]
    assert offer.type == "other"
    assert offer.value == 0
    assert offer.description == "Special Offer"


def test_non_list_catalog_is_rejected():
    with pytest.raises(CatalogFormatError):
        load_catalog({"bank": "HDFC Bank"})


def test_json_provider_reads_file(tmp_path):
    path = tmp_path / "offers.json"
    path.write_text(json.dumps(RAW_OFFERS, ensure_ascii=False), encoding="utf-8")
    catalog = JsonOfferProvider(source="amazon-2025", file_path=str(path)).fetch_catalog()
    assert len(catalog.offers) == 8
    assert {offer.source for offer in catalog.offers} == {"amazon-2025"}


def test_json_provider_rejects_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(CatalogFormatError):
        JsonOfferProvider(source="bank", file_path=str(path)).fetch_catalog()


def test_merge_catalogs_keeps_order():
    first = load_catalog(RAW_OFFERS[:1])
    second = load_catalog(["junk"])
    merged = merge_catalogs(first, second)
    assert merged.offers == first.offers
    assert len(merged.warnings) == 1
