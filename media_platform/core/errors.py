"""
Exception hierarchy shared by the API service and the processing worker.

    MediaPlatformError
    ├── JobParseError          malformed queue message (bad JSON / missing field)
    ├── ObjectNotFoundError    object store has no object under the key
    ├── SecretRetrievalError   credential bundle could not be fetched or parsed
    └── MediaProcessingError   transform produced no usable output

Infrastructure errors coming from the SDKs are not wrapped; they propagate as-is
and are treated like any other processing failure.
"""


class MediaPlatformError(Exception):
    pass


class JobParseError(MediaPlatformError):
    pass


class ObjectNotFoundError(MediaPlatformError):
    def __init__(self, key: str):
        super().__init__(f"Object not found: {key}")
        self.key = key


class SecretRetrievalError(MediaPlatformError):
    pass


class MediaProcessingError(MediaPlatformError):
    pass
