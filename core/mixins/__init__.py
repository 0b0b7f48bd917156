"""
Core Mixins Package

Mixins riutilizzabili per le views.
"""


# View Mixins - lazy import to avoid circular dependencies
def __getattr__(name):
    if name in ("PermissionRequiredMixin", "PortalAdminRequiredMixin",
                "JSONResponseMixin", "FormValidMessageMixin", "FormInvalidMessageMixin",
                "SetCreatedByMixin", "DraftAutosaveMixin", "CustomPaginationMixin",
                "FilterMixin", "SearchMixin", "BreadcrumbMixin"):
        from . import view_mixins
        return getattr(view_mixins, name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "PermissionRequiredMixin",
    "PortalAdminRequiredMixin",
    "JSONResponseMixin",
    "FormValidMessageMixin",
    "FormInvalidMessageMixin",
    "SetCreatedByMixin",
    "DraftAutosaveMixin",
    "CustomPaginationMixin",
    "FilterMixin",
    "SearchMixin",
    "BreadcrumbMixin",
]
