"""
Role based access control.

Every protected action is listed in :data:`CAPABILITIES` with the set of
roles allowed to perform it; views declare the capability they need via
:func:`require` instead of spelling out role lists inline.
"""
from django.db.models import Q
from rest_framework.permissions import BasePermission

NURSE, DOCTOR, ADMIN, PATIENT = 'nurse', 'doctor', 'admin', 'patient'
STAFF_ROLES = frozenset({NURSE, DOCTOR, ADMIN})

CAPABILITIES: dict[str, frozenset] = {
    'appointment.view': frozenset({NURSE, DOCTOR, ADMIN, PATIENT}),
    'appointment.create': frozenset({NURSE, ADMIN}),
    'appointment.delete': frozenset({NURSE, ADMIN}),
    'inventory.view': frozenset({NURSE, DOCTOR, ADMIN}),
    'inventory.manage': frozenset({NURSE, ADMIN}),
    'record.view': frozenset({DOCTOR, NURSE, ADMIN, PATIENT}),
    'record.search': frozenset({DOCTOR, NURSE, ADMIN}),
    'record.write': frozenset({DOCTOR, NURSE}),
    'record.delete': frozenset({DOCTOR, ADMIN}),
}

_ROLE_ORDER = (NURSE, DOCTOR, ADMIN, PATIENT)


def allowed_roles(capability: str) -> list[str]:
    return [r for r in _ROLE_ORDER if r in CAPABILITIES[capability]]


class HasCapability(BasePermission):
    """Allow users whose role is in the capability's allow-list."""
    capability = ''

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) in CAPABILITIES[self.capability])

    @property
    def message(self) -> str:
        if self.capability not in CAPABILITIES:
            return 'Insufficient permissions'
        return f"This action requires one of the following roles: {', '.join(allowed_roles(self.capability))}"


def require(*capabilities: str, **by_method: str) -> list[type]:
    """Build permission classes for ``@permission_classes``.

    ``require(cap)`` checks one capability for every method.  A pair
    ``require(read, write)`` checks ``read`` for safe methods and
    ``write`` for everything else.  Keyword form maps HTTP methods to
    capabilities, e.g. ``require(GET='record.view', DELETE='record.delete')``.
    """
    if len(capabilities) == 1 and not by_method:
        return [type(f"Can_{capabilities[0].replace('.', '_')}", (HasCapability,), {'capability': capabilities[0]})]
    if capabilities:
        read, write = capabilities
        by_method = {'GET': read, 'HEAD': read, 'OPTIONS': read, '*': write}

    class ByMethod(HasCapability):
        def has_permission(self, request, view) -> bool:  # type: ignore[override]
            self.capability = by_method.get(request.method) or by_method.get('*', '')
            if not self.capability:
                return False
            return super().has_permission(request, view)

    return [ByMethod]


# ---------------------------------------------------------------------------
# Patient record ownership
# ---------------------------------------------------------------------------
# Patients are linked to records heuristically: by email, or by the name
# in their token appearing in the record's patient name.  Call sites go
# through these two helpers only, so an exact identity link can replace
# the heuristic in one place.

def _token_name(user) -> str:
    """The name carried in the user's token (``User.display_name``)."""
    return (getattr(user, 'display_name', '') or '').strip()


def patient_can_view_record(user, record) -> bool:
    email = (getattr(user, 'email', '') or '').strip()
    name = _token_name(user)
    if email and record.email and record.email == email:
        return True
    return bool(name) and name.lower() in (record.patient_name or '').lower()


def records_visible_to(user, qs):
    if getattr(user, 'role', None) != PATIENT:
        return qs
    email = (getattr(user, 'email', '') or '').strip()
    name = _token_name(user)
    cond = Q(pk__in=[])
    if email:
        cond |= Q(email=email)
    if name:
        cond |= Q(patient_name__icontains=name)
    return qs.filter(cond)
