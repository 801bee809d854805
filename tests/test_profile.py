import json

import pytest

from wallet_agent.errors import InvalidInputError
from wallet_agent.profile import load_profile, load_profile_file

PROFILE = {
    "id": "user_walletwise_001",
    "savedPaymentMethods": [
        {"id": "pm_hdfc_regalia_cc", "name": "HDFC Regalia Gold CC", "type": "credit_card", "bankName": "HDFC Bank", "usage": 0.7},
        {"id": "pm_federal_debit", "name": "Federal Bank Debit Card", "type": "debit_card", "bankName": "Federal Bank", "usage": 0.2},
        {
            "id": "pm_paytm_wallet",
            "name": "Paytm Wallet",
            "type": "wallet",
            "walletBalance": 320,
            "offers": [
                {
                    "id": "paytm_generic_bill_offer",
                    "description": "₹10 off on bill payments over ₹200 via Paytm Wallet",
                    "type": "flat_discount",
                    "value": 10,
                    "valueType": "amount",
                    "conditions": {"minSpend": 200, "period": "Ongoing"},
                    "categoryAffinity": ["Bills"],
                }
            ],
        },
        {"id": "pm_gpay_upi", "name": "UPI", "type": "upi", "walletBalance": 999},
    ],
}


def test_profile_snapshot_keeps_order_and_normalizes_fields():
    methods = load_profile(PROFILE)
    assert [method.method_id for method in methods] == [
        "pm_hdfc_regalia_cc",
        "pm_federal_debit",
        "pm_paytm_wallet",
        "pm_gpay_upi",
    ]
    assert methods[0].usage_percentage == pytest.approx(70)
    assert methods[1].usage_percentage is None
    assert methods[2].wallet_balance == 320
    assert methods[3].wallet_balance is None


def test_profile_offers_read_nested_conditions():
    offer = load_profile(PROFILE)[2].offers[0]
    assert offer.type == "flat_discount"
    assert offer.min_spend == 200
    assert offer.period == "Ongoing"
    assert offer.category_affinity == ("Bills",)


def test_bare_list_and_usage_percentage_are_accepted():
    methods = load_profile([{"id": "cc", "name": "Card", "type": "credit_card", "usagePercentage": 85}])
    assert methods[0].usage_percentage == 85


@pytest.mark.parametrize(
    "item, code",
    [
        ({"id": "x", "name": "X", "type": "crypto"}, "INVALID_INPUT_TYPE"),
        ({"id": "", "name": "X", "type": "upi"}, "INVALID_INPUT_METHODS"),
        ({"id": "cc", "name": "Card", "type": "credit_card", "usage": 1.5}, "INVALID_INPUT_USAGE"),
        ({"id": "cc", "name": "Card", "type": "credit_card", "usagePercentage": 140}, "INVALID_INPUT_USAGEPERCENTAGE"),
        ({"id": "w", "name": "Wallet", "type": "wallet", "walletBalance": "lots"}, "INVALID_INPUT_WALLETBALANCE"),
        ({"id": "w", "name": "Wallet", "type": "wallet", "offers": [{"description": "no id"}]}, "INVALID_INPUT_OFFERS"),
        ({"id": "w", "name": "Wallet", "type": "wallet", "offers": ["oops"]}, "INVALID_INPUT_OFFERS"),
        ({"id": "w", "name": "Wallet", "type": "wallet", "offers": [{"id": "o", "type": "cashbak"}]}, "INVALID_INPUT_OFFERS"),
        (
            {"id": "w", "name": "Wallet", "type": "wallet", "offers": [{"id": "o", "type": "cashback", "valueType": "percent"}]},
            "INVALID_INPUT_OFFERS",
        ),
    ],
)
def test_invalid_methods_are_rejected(item, code):
    with pytest.raises(InvalidInputError) as err:
        load_profile([item])
    assert err.value.error_code == code


def test_load_profile_file(tmp_path):
    path = tmp_path / "profile.json"
    path.write_text(json.dumps(PROFILE, ensure_ascii=False), encoding="utf-8")
    assert len(load_profile_file(str(path))) == 4

    broken = tmp_path / "broken.json"
    broken.write_text("[", encoding="utf-8")
    with pytest.raises(InvalidInputError):
        load_profile_file(str(broken))
