"""Permission helpers for the offers API."""

from accounts.permissions import is_admin


def company_profile_of(user):
    """Return the CompanyProfile of a company user, or None."""
    if not user or not user.is_authenticated or getattr(user, 'role', None) != 'company':
        return None
    return getattr(user, 'company_profile', None)


def can_manage_offer(user, offer):
    """Project owner or admin."""
    if not user or not user.is_authenticated:
        return False
    return is_admin(user) or offer.project.owner_id == user.id
