__all__ = [
    "NotionMirrorError",
    "MissingTitlePropertyError",
    "ConfigError",
]


class NotionMirrorError(Exception):
    """
    Base class for errors raised by this package.
    """


class MissingTitlePropertyError(NotionMirrorError):
    """
    Raised when a database schema has no title-typed property, so pages
    can't be given a display name.
    """

    database_id: str

    def __init__(self, database_id: str):
        self.database_id = database_id
        super().__init__(f"Database {database_id} is missing a title property")


class ConfigError(NotionMirrorError):
    """
    Raised when required configuration, e.g. the integration token, is
    missing or invalid.
    """
