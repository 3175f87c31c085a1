from typing import Optional

# Korean bank names as shown to customers -> gateway bank codes.
BANK_CODES = {
    "경남": "KYONGNAMBANK",
    "광주": "GWANGJUBANK",
    "국민": "KOOKMIN",
    "기업": "IBK",
    "농협": "NONGHYUP",
    "대구": "DAEGUBANK",
    "부산": "BUSANBANK",
    "산업": "KDB",
    "새마을": "SAEMAUL",
    "수협": "SUHYUP",
    "신한": "SHINHAN",
    "신협": "SHINHYUP",
    "씨티": "CITI",
    "우리": "WOORI",
    "우체국": "POST",
    "전북": "JEONBUKBANK",
    "제주": "JEJUBANK",
    "카카오뱅크": "KAKAOBANK",
    "케이뱅크": "KBANK",
    "토스뱅크": "TOSSBANK",
    "하나": "HANA",
    "SC제일": "SC",
}

BANK_NAMES = {code: name for name, code in BANK_CODES.items()}


def resolve_bank_code(bank: Optional[str]) -> Optional[str]:
    """Accept either a Korean bank name ("국민", "국민은행") or a gateway code ("KOOKMIN")."""
    if not bank:
        return None
    bank = str(bank).strip()
    if bank in BANK_CODES:
        return BANK_CODES[bank]
    if bank.upper() in BANK_NAMES:
        return bank.upper()
    if bank.endswith("은행") and bank[:-2] in BANK_CODES:
        return BANK_CODES[bank[:-2]]
    return None
