# ---------------------------------
# TYPED EXCEPTIONS
# ---------------------------------


class BackendResponseError(ValueError):
    """Raised when the backend answers 2xx with a payload we cannot read."""
    pass

class TranslationFileError(RuntimeError):
    pass
