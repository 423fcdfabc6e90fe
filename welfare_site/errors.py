"""
Errors raised by the content services.

The app turns these into JSON responses: validation errors become 400,
missing entities 404, disabled features 403, id clashes 409. Store failures
(`welfare_site.store.StoreError`) become 500.
"""


class ContentValidationError(ValueError):
    status_code = 400


class ContentNotFoundError(LookupError):
    status_code = 404


class FeatureDisabledError(Exception):
    status_code = 403


class ContentConflictError(Exception):
    status_code = 409
