"""Keyword classifiers for category and payment channel.

Tables are ordered: the first group with a matching keyword wins, so
more specific groups (Fuel) sit above broader ones (Transport). Keywords
of four characters or fewer are matched on word boundaries to avoid
false positives ("ola" inside "cola", "rent" inside "current").
"""

import re
from typing import Optional, Pattern, Tuple, Type, TypeVar

from .models import Category, CategoryLike, PaymentMethod, PaymentMethodLike, RawLabel
from .resolvers import is_missing

E = TypeVar("E", Category, PaymentMethod)

CATEGORY_KEYWORDS: Tuple[Tuple[Category, Tuple[str, ...]], ...] = (
    (Category.SALARY, ("salary", "bonus", "stipend", "payroll")),
    (Category.EMI, ("emi", "loan", "bajaj fin", "home finance")),
    (Category.INSURANCE, ("insurance", "lic", "policy")),
    (Category.INVESTMENT, ("interest", "dividend", "zerodha", "groww", "sip", "mutual fund", "upstox")),
    (Category.CHARGES, ("charges", "fee", "gst", "penalty", "sms alert", "amc")),
    (Category.ATM, ("atm", "cash withdrawal", "nwd", "atw")),
    (
        Category.FOOD,
        ("swiggy", "zomato", "food", "restaurant", "cafe", "tea", "coffee", "burger", "pizza", "bakery", "dominos"),
    ),
    (Category.FUEL, ("fuel", "petrol", "diesel", "pump", "hpcl", "bpcl", "indian oil", "shell")),
    (
        Category.TRANSPORT,
        ("uber", "ola", "rapido", "parking", "toll", "fastag", "metro", "train", "rail", "railway", "irctc", "taxi", "cab", "bus"),
    ),
    (
        Category.ENTERTAINMENT,
        ("netflix", "prime", "movie", "cinema", "hotstar", "spotify", "youtube", "bookmyshow", "pvr", "inox"),
    ),
    (Category.HOUSING, ("rent", "maintenance", "society", "broker")),
    (Category.BILLS, ("bill", "recharge", "broadband", "postpaid", "prepaid", "jio", "airtel", "dth")),
    (Category.UTILITIES, ("electricity", "water", "gas", "power", "bescom", "bwssb")),
    (
        Category.HEALTH,
        ("hospital", "pharmacy", "doctor", "medical", "medicine", "clinic", "lab", "apollo", "medplus"),
    ),
    (
        Category.SHOPPING,
        ("amazon", "flipkart", "myntra", "ajio", "shopping", "shop", "store", "market", "mart", "dmart"),
    ),
    (Category.TRANSFER, ("transfer", "tfr", "neft", "imps", "rtgs")),
)

# Longer keywords that also occur inside other words ("recharges").
WHOLE_WORD_KEYWORDS = frozenset({"charges"})

PAYMENT_KEYWORDS: Tuple[Tuple[PaymentMethod, Tuple[str, ...]], ...] = (
    (PaymentMethod.UPI, ("upi", "@", "gpay", "phonepe", "paytm", "bhim")),
    (PaymentMethod.CASH, ("atm", "cash", "withdraw")),
    (PaymentMethod.NEFT, ("neft",)),
    (PaymentMethod.IMPS, ("imps",)),
    (PaymentMethod.RTGS, ("rtgs",)),
    (PaymentMethod.CHEQUE, ("cheque", "chq", "clearing")),
    (PaymentMethod.CARD, ("card", "pos", "visa", "mastercard", "rupay")),
)


def _keyword_pattern(keywords: Tuple[str, ...]) -> Pattern[str]:
    alternatives = []
    for keyword in keywords:
        if (len(keyword) <= 4 and keyword.isalnum()) or keyword in WHOLE_WORD_KEYWORDS:
            alternatives.append(r"\b" + re.escape(keyword) + r"\b")
        else:
            alternatives.append(re.escape(keyword))
    return re.compile("|".join(alternatives))


_CATEGORY_PATTERNS = tuple((c, _keyword_pattern(kws)) for c, kws in CATEGORY_KEYWORDS)
_PAYMENT_PATTERNS = tuple((p, _keyword_pattern(kws)) for p, kws in PAYMENT_KEYWORDS)


def _first_match(patterns, text, default):
    lower = str(text or "").lower()
    for variant, pattern in patterns:
        if pattern.search(lower):
            return variant
    return default


def detect_category(text: Optional[str]) -> Category:
    return _first_match(_CATEGORY_PATTERNS, text, Category.OTHER)


def detect_payment_method(text: Optional[str]) -> PaymentMethod:
    return _first_match(_PAYMENT_PATTERNS, text, PaymentMethod.ONLINE)


def _clean_hint(hint) -> str:
    if is_missing(hint):
        return ""
    return str(hint).strip()


def _named_variant(enum_cls: Type[E], hint: str) -> Optional[E]:
    key = hint.lower()
    for member in enum_cls:
        if key in (member.value.lower(), member.name.lower()):
            return member
    return None


def _resolve(enum_cls, detect, default, description, hint):
    """Shared resolution order for the open taxonomies.

    1. a hint naming a known (non-default) variant
    2. keywords in the description
    3. keywords in the hint
    4. the hint itself, preserved as a raw label
    5. the default variant
    """
    hint = _clean_hint(hint)
    if hint:
        named = _named_variant(enum_cls, hint)
        if named is not None and named is not default:
            return named

    detected = detect(description)
    if detected is not default:
        return detected

    if hint:
        detected = detect(hint)
        if detected is not default:
            return detected
        if _named_variant(enum_cls, hint) is None:
            return RawLabel(hint)

    return default


def resolve_category(description, hint=None) -> CategoryLike:
    """Category from description keywords, honouring a category column."""
    return _resolve(Category, detect_category, Category.OTHER, description, hint)


def resolve_payment_method(description, hint=None) -> PaymentMethodLike:
    """Payment channel from description keywords, honouring a mode column."""
    return _resolve(
        PaymentMethod, detect_payment_method, PaymentMethod.ONLINE, description, hint
    )
