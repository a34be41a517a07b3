"""
Error taxonomy for the profile core.
"""


class ProfileBookError(Exception):
    """Base class for profile core errors."""
    pass


class ReadError(ProfileBookError):
    """A binary asset could not be read or decoded."""

    def __init__(self, name: str, reason: str = ""):
        self.name = name
        self.reason = reason
        message = f"Failed to read asset '{name}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class QuotaExceeded(ProfileBookError):
    """Persistent storage capacity would be exceeded by a write."""

    guidance = "Storage quota exceeded! Please remove some photos or use smaller images."

    def __init__(self, key: str, required: int, quota: int):
        self.key = key
        self.required = required
        self.quota = quota
        super().__init__(f"{self.guidance} (key '{key}' needs {required} of {quota} bytes)")


class SaveInProgress(ProfileBookError):
    """A confirm was triggered while a previous one is still pending."""
    pass


class ProfileNotFound(ProfileBookError):
    """No profile is stored in the current-profile slot."""
    pass
