from __future__ import annotations

from enum import IntEnum


class Version(IntEnum):
    R9 = 9
    R10 = 10
    R12 = 12
    R13 = 13
    R14 = 14
    R2000 = 15
    R2004 = 18
    R2007 = 21
    R2010 = 24
    R2013 = 27
    R2018 = 32

    @property
    def acadver(self) -> str:
        return _ACADVER_BY_VERSION[self]

    @classmethod
    def parse(cls, value: "str | Version") -> "Version":
        if isinstance(value, Version):
            return value
        text = str(value).strip().upper()
        if text in _VERSION_BY_ACADVER:
            return _VERSION_BY_ACADVER[text]
        if text in cls.__members__:
            return cls[text]
        if text == "R11":
            return cls.R12
        raise ValueError(f"unsupported DXF version: {value}")


_ACADVER_BY_VERSION = {
    Version.R9: "AC1004",
    Version.R10: "AC1006",
    Version.R12: "AC1009",
    Version.R13: "AC1012",
    Version.R14: "AC1014",
    Version.R2000: "AC1015",
    Version.R2004: "AC1018",
    Version.R2007: "AC1021",
    Version.R2010: "AC1024",
    Version.R2013: "AC1027",
    Version.R2018: "AC1032",
}
_VERSION_BY_ACADVER = {acadver: version for version, acadver in _ACADVER_BY_VERSION.items()}

SUPPORTED_VERSIONS = tuple(Version)
DEFAULT_VERSION = Version.R2000
OLDEST = Version.R9
NEWEST = Version.R2018
