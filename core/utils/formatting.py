"""Formatting utilities for display and logs."""


def format_cents(amount_cents: int, currency: str = "usd") -> str:
    """
    Format an amount in minor currency units for display.

    Args:
        amount_cents: Amount in minor units (e.g. 450000)
        currency: ISO currency code, any case

    Returns:
        Formatted string (e.g. "$4,500.00")
    """
    symbols = {
        "USD": "$",
        "EUR": "€",
        "GBP": "£",
        "CAD": "C$",
    }
    code = currency.upper()
    symbol = symbols.get(code, code + " ")
    return f"{symbol}{amount_cents / 100:,.2f}"


def mask_email(email: str) -> str:
    """
    Mask email address for privacy.

    Args:
        email: Email address to mask

    Returns:
        Masked email (e.g., "j***@example.com")
    """
    if '@' not in email:
        return email

    local, domain = email.split('@', 1)

    if len(local) <= 2:
        masked_local = local[:1] + '*'
    else:
        masked_local = local[0] + '*' * (len(local) - 2) + local[-1]

    return f"{masked_local}@{domain}"
