"""
Parser settings.

ParserSettings is supplied by the caller and read by the binder and the
descriptor cache; it never changes once built.

- case_sensitive: when False (default) option names match case-insensitively
  after an exact match has been tried.
- ignore_unknown_arguments: when True (default) unknown option names and
  surplus bare values are dropped; when False each one is reported as an
  UNKNOWN_OPTION error.
"""
import dataclasses


@dataclasses.dataclass(frozen=True, slots=True)
class ParserSettings:
    case_sensitive: bool = False
    ignore_unknown_arguments: bool = True

    def __post_init__(self):
        for field in dataclasses.fields(self):
            if not isinstance(getattr(self, field.name), bool):
                raise TypeError(f"parser-settings '{field.name}' must be a boolean")


DEFAULT_SETTINGS = ParserSettings()


__all__ = (
    "ParserSettings",
    "DEFAULT_SETTINGS",
)
