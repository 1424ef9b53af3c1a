"""Email canonicalization.

Every write and lookup goes through normalize_email() so that two spellings
of the same mailbox resolve to one account.
"""

GMAIL_DOMAINS = frozenset({'gmail.com', 'googlemail.com'})


def normalize_email(email: str) -> str:
    """Lower-case and trim an address; drop dots from Gmail local parts.

    >>> normalize_email(' A.B@GMAIL.com ')
    'ab@gmail.com'
    """
    email = email.strip().lower()
    local, sep, domain = email.rpartition('@')
    if not sep:
        return email
    if domain in GMAIL_DOMAINS:
        local = local.replace('.', '')
    return f"{local}@{domain}"
