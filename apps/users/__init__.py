"""Users app package.

Defines the single account model used for patients, doctors and
administrators (``apps.users.models.CustomUser`` is the AUTH_USER_MODEL),
the identity resolver that maps callers to roles and the DRF permission
classes that guard every endpoint.
"""
