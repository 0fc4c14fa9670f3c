# medreminder/errors.py


class ValidationError(Exception):
    """Input rejected before any call to the identity provider or the store."""

    def __init__(self, key, detail=None):
        super().__init__(detail or key)
        self.key = key
        self.detail = detail


class AuthProviderError(Exception):
    """Identity-provider failure carrying a stable ``auth/...`` code."""

    def __init__(self, code, message=""):
        super().__init__(message or code)
        self.code = code
        self.message = message


class StoreError(Exception):
    """A document-store call failed (network, permission or unknown)."""


class NotFoundError(Exception):
    pass
