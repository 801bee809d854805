from wallet_agent.catalog import load_offers
from wallet_agent.models import Offer, PaymentMethod
from wallet_agent.registry import attach_offers, card_name_matches, offers_for_method

RAW_OFFERS = [
    {
        "bank": "HDFC Bank",
        "cardTypes": ["Credit Card"],
        "offers": [
            {"card": "HDFC Millennia", "cashbackPercentAmazon": 5},
            {"discountPercent": 10, "minSpend": 5000, "maxDiscountCredit": 1250},
        ],
    },
    {
        "bank": "Federal Bank",
        "cardTypes": ["Debit Card", "Debit Card EMI"],
        "offers": [{"discountPercent": 10, "minSpend": 5000, "maxDiscountDebit": 750}],
    },
    {
        "bank": "ICICI Bank",
        "cardTypes": ["Credit Card"],
        "offers": [
            {"card": "Amazon Pay ICICI CC", "benefits": "5% cashback for Prime members"},
            {"extra": "Flat ₹100 off on first order"},
        ],
    },
    {
        "bank": "SBI Card",
        "cardTypes": ["All SBI Credit Cards (ex Corporate, Cashback, Paytm)"],
        "offers": [{"discountPercent": 10, "maxDiscountCredit": 1500}],
    },
]
CATALOG = load_offers(RAW_OFFERS)


def _ids(offers):
    return [offer.offer_id for offer in offers]


def test_card_name_matching():
    assert card_name_matches("Amazon Pay ICICI CC", "Amazon Pay ICICI Credit Card")
    assert card_name_matches("HDFC Millennia", "HDFC Millennia")
    assert not card_name_matches("HDFC Millennia", "HDFC Regalia Gold CC")


def test_card_specific_offers_only_reach_that_card():
    regalia = PaymentMethod(method_id="regalia", name="HDFC Regalia Gold CC", type="credit_card", bank_name="HDFC Bank")
    millennia = PaymentMethod(method_id="millennia", name="HDFC Millennia", type="credit_card", bank_name="HDFC Bank")
    assert _ids(offers_for_method(regalia, CATALOG)) == ["bank_offer_hdfc_bank_2"]
    assert _ids(offers_for_method(millennia, CATALOG)) == ["bank_offer_hdfc_bank_1", "bank_offer_hdfc_bank_2"]


def test_cc_shorthand_in_catalog_matches_full_card_name():
    icici = PaymentMethod(method_id="icici", name="Amazon Pay ICICI Credit Card", type="credit_card", bank_name="ICICI Bank")
    assert _ids(offers_for_method(icici, CATALOG)) == ["bank_offer_icici_bank_4", "bank_offer_icici_bank_5"]


def test_card_type_labels_must_cover_the_method_type():
    hdfc_debit = PaymentMethod(method_id="hd", name="HDFC Debit Card", type="debit_card", bank_name="HDFC Bank")
    federal = PaymentMethod(method_id="fed", name="Federal Bank Debit Card", type="debit_card", bank_name="Federal Bank")
    sbi = PaymentMethod(method_id="sbi", name="SBI SimplyCLICK CC", type="credit_card", bank_name="SBI Card")
    assert offers_for_method(hdfc_debit, CATALOG) == []
    assert _ids(offers_for_method(federal, CATALOG)) == ["bank_offer_federal_bank_3"]
    assert _ids(offers_for_method(sbi, CATALOG)) == ["bank_offer_sbi_card_6"]


def test_methods_without_bank_or_card_type_get_no_bank_offers():
    upi = PaymentMethod(method_id="upi", name="UPI", type="upi")
    wallet = PaymentMethod(method_id="w", name="HDFC PayZapp", type="wallet", bank_name="HDFC Bank")
    assert offers_for_method(upi, CATALOG) == []
    assert offers_for_method(wallet, CATALOG) == []


def test_attach_offers_appends_after_own_offers_without_mutating():
    own = Offer(offer_id="paytm_bills", description="₹10 off on bills", type="flat_discount", value=10, value_type="amount")
    methods = (
        PaymentMethod(method_id="fed", name="Federal Bank Debit Card", type="debit_card", bank_name="Federal Bank", offers=(own,)),
        PaymentMethod(method_id="upi", name="UPI", type="upi"),
    )
    attached = attach_offers(methods, CATALOG)

    assert _ids(attached[0].offers) == ["paytm_bills", "bank_offer_federal_bank_3"]
    assert attached[1].offers == ()
    assert methods[0].offers == (own,)
    assert [method.method_id for method in attached] == ["fed", "upi"]
