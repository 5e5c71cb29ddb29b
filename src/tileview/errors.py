"""Exception hierarchy for tileview.

Decoded no-data samples are not errors; each diagram paints them with its
own no-data policy. Everything below signals a failure that must reach the
caller.
"""


class TileViewError(Exception):
    pass


class TileFetchError(TileViewError):
    """A tile request in a fetch batch failed; the whole batch is discarded."""

    def __init__(self, url, reason):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch tile {url}: {reason}")


class ConfigurationError(TileViewError):
    pass


class NotApplicableError(ConfigurationError, AttributeError):
    """A property was requested that the active diagram variant does not have."""

    def __init__(self, prop, kind):
        self.prop = prop
        self.kind = kind
        super().__init__(f"'{prop}' is not applicable to a {kind} diagram")


class UnknownColorMapError(ConfigurationError, KeyError):
    pass


class InsufficientGridsError(ConfigurationError):
    pass


class LayerConfigError(ConfigurationError):
    pass
