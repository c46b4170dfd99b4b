class PhotoboothError(Exception):
    pass


class ConfigError(PhotoboothError):
    """The booth configuration document could not be loaded or validated."""


class CameraUnavailableError(PhotoboothError):
    pass


class CaptureLimitError(PhotoboothError):
    """A shot was captured after the session already holds every shot."""


class CaptureIncompleteError(PhotoboothError):
    """The collage was requested before every shot was captured."""


class TemplateIndexError(PhotoboothError):
    pass


class InvalidScreenError(PhotoboothError):
    """The action is not available on the screen the booth is showing."""


class UploadError(PhotoboothError):
    pass


class FileTooLargeError(PhotoboothError):
    pass
