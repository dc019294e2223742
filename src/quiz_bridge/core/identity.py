"""Address normalization and equality."""

import logging
import re
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

LINKED_IDENTITY_SUFFIX = "@lid"
USER_SUFFIX = "@s.whatsapp.net"

# "<digits>:<device>@s.whatsapp.net" -> "<digits>"
_DEVICE_SUFFIX = re.compile(r":\d+@s\.whatsapp\.net$")

# Directory lookup: linked-identity alias -> phone address, None if unknown
PhoneLookup = Callable[[str], Awaitable[str | None]]


def strip_address(address: str) -> str:
    """Remove the transport suffix and device segment from an address."""
    return _DEVICE_SUFFIX.sub("", address).replace(USER_SUFFIX, "")


class IdentityResolver:
    """Resolves platform addresses to their canonical phone form.

    Linked-identity aliases (``...@lid``) are looked up in the directory
    when one is available. A miss, or a failing lookup, falls back to the
    address as given; such an address simply won't compare equal to its
    phone form.
    """

    def __init__(self, lookup: PhoneLookup | None = None):
        self._lookup = lookup

    async def resolve(self, address: str) -> str:
        """Resolve an address to its canonical form."""
        resolved = address
        if address.endswith(LINKED_IDENTITY_SUFFIX) and self._lookup is not None:
            try:
                phone = await self._lookup(address)
            except Exception as e:
                logger.warning(f"Identity lookup failed for {address}: {e}")
                phone = None
            if phone:
                resolved = phone
            else:
                logger.debug(f"No phone mapping for {address}, using it unresolved")
        return strip_address(resolved)

    async def equals(self, a: str, b: str) -> bool:
        """Check whether two addresses refer to the same identity."""
        return await self.resolve(a) == await self.resolve(b)
