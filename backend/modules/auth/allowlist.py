"""Email-domain allow-list checks."""


def email_domain(email: str) -> str:
    """Return the lower-cased domain part of an email, or '' if there is none."""
    _, sep, domain = email.rpartition("@")
    if not sep:
        return ""
    return domain.strip().lower()


def is_email_authorized(email: str, authorized_domains: list[str]) -> bool:
    """
    Check an email against the authorized domain list.

    An empty list authorizes everyone. Matching is case-insensitive and
    exact on the domain (subdomains must be listed explicitly).
    """
    if not authorized_domains:
        return True

    domain = email_domain(email)
    if not domain:
        return False

    return domain in {d.lower() for d in authorized_domains}
