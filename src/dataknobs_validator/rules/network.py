"""Identifier, network address and color rules."""

from __future__ import annotations

import ipaddress
import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlsplit

from ..exceptions import RuleArgumentError
from .base import Rule, require_args

UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)
NIL_UUID = "00000000-0000-0000-0000-000000000000"
MAX_UUID = "ffffffff-ffff-ffff-ffff-ffffffffffff"

# Crockford Base32 excludes I, L, O and U
ULID_PATTERN = re.compile(r"^[0-9A-HJKMNP-TV-Z]{26}$", re.IGNORECASE)

MAC_SEPARATED = re.compile(r"^[0-9A-Fa-f]{2}(?:([:-])[0-9A-Fa-f]{2})(?:\1[0-9A-Fa-f]{2})*$")
MAC_DOTTED = re.compile(r"^[0-9A-Fa-f]{4}(?:\.[0-9A-Fa-f]{4})+$")

HEX_COLOR_PATTERN = re.compile(r"^#(?:[0-9A-Fa-f]{3}|[0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})$")


class UuidRule(Rule):
    """Value must be a canonical UUID, optionally of a given version.

    Versions 1 to 8 check the version nibble; ``0`` accepts only the nil UUID
    and ``max`` only the all-ones UUID.
    """

    name = "uuid"

    def __init__(self, version: str | None = None):
        self.version = version

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 0, 1)
        if not args:
            return cls()
        version = args[0].strip().lower()
        if version != "max" and not (version.isdigit() and 0 <= int(version) <= 8):
            raise RuleArgumentError(cls.name, f"unsupported version '{args[0]}'")
        return cls(version)

    def passes(self, attribute: str, value: Any) -> bool:
        if not isinstance(value, str) or not UUID_PATTERN.match(value):
            return False
        if self.version is None:
            return True
        text = value.lower()
        if self.version == "max":
            return text == MAX_UUID
        if self.version == "0":
            return text == NIL_UUID
        return text[14] == self.version

    def message(self) -> str:
        return "The :attribute field must be a valid UUID."

    def __repr__(self) -> str:
        return f"UuidRule(version={self.version!r})"


class UlidRule(Rule):
    name = "ulid"

    def passes(self, attribute: str, value: Any) -> bool:
        return isinstance(value, str) and bool(ULID_PATTERN.match(value))

    def message(self) -> str:
        return "The :attribute field must be a valid ULID."


class UrlRule(Rule):
    """Value must be an absolute URL with a host, optionally limited to some schemes."""

    name = "url"

    def __init__(self, schemes: list[str] | None = None):
        self.schemes = [scheme.lower() for scheme in schemes or []]

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        return cls([arg.strip() for arg in args if arg.strip()])

    def passes(self, attribute: str, value: Any) -> bool:
        if not isinstance(value, str) or not value or any(char.isspace() for char in value):
            return False
        try:
            parts = urlsplit(value)
            # port raises ValueError when malformed
            hostname, _port = parts.hostname, parts.port
        except ValueError:
            return False
        if not parts.scheme or not hostname:
            return False
        return not self.schemes or parts.scheme.lower() in self.schemes

    def message(self) -> str:
        return "The :attribute field must be a valid URL."

    def replacements(self) -> dict[str, str]:
        return {"values": ", ".join(self.schemes)}

    def __repr__(self) -> str:
        return f"UrlRule(schemes={self.schemes!r})"


class IpRule(Rule):
    """Value must be an IPv4 or IPv6 address."""

    name = "ip"
    #: Accepted address versions
    versions: tuple[int, ...] = (4, 6)

    def passes(self, attribute: str, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        try:
            address = ipaddress.ip_address(value)
        except ValueError:
            return False
        return address.version in self.versions

    def message(self) -> str:
        return "The :attribute field must be a valid IP address."


class Ipv4Rule(IpRule):
    name = "ipv4"
    versions = (4,)

    def message(self) -> str:
        return "The :attribute field must be a valid IPv4 address."


class Ipv6Rule(IpRule):
    name = "ipv6"
    versions = (6,)

    def message(self) -> str:
        return "The :attribute field must be a valid IPv6 address."


class MacAddressRule(Rule):
    """Value must be a MAC address of 6 or 8 bytes.

    Accepts colon or dash separated octets (``01:23:45:67:89:ab``) and dotted
    groups of four hex digits (``0123.4567.89ab``).
    """

    name = "mac_address"

    def passes(self, attribute: str, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        if MAC_SEPARATED.match(value):
            octets = len(re.split(r"[:-]", value))
        elif MAC_DOTTED.match(value):
            octets = len(value.split(".")) * 2
        else:
            return False
        return octets in (6, 8)

    def message(self) -> str:
        return "The :attribute field must be a valid MAC address."


class HexColorRule(Rule):
    """Value must be ``#`` followed by 3, 6 or 8 hex digits."""

    name = "hex_color"

    def passes(self, attribute: str, value: Any) -> bool:
        return isinstance(value, str) and bool(HEX_COLOR_PATTERN.match(value))

    def message(self) -> str:
        return "The :attribute field must be a valid hexadecimal color."
