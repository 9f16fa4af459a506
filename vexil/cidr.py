"""
CIDR values: an IP address paired with the network it belongs to.

Overview
- Network(ip, mask): raw network bytes. Network() is the empty network.
- CIDR(address, network, raw): "192.0.2.1/24" has the address 192.0.2.1 and the
  network 192.0.2.0/24; raw keeps the text the value was parsed from.
- parse_cidr(text): RFC 4632 / RFC 4291 notation ("192.0.2.0/24", "2001:db8::/32").

Equality
- Addresses compare by byte value.
- An empty network (None, or a Network with zero-length ip and mask) equals any other
  empty network and no concrete one; concrete networks must match ip and mask bytes.
- raw is informational and never compared.
"""
import ipaddress
from typing import NamedTuple

from rich.text import Text


class Network(NamedTuple):
    ip: bytes = b""
    mask: bytes = b""

    @classmethod
    def from_ipaddress(cls, network, /):
        return cls(network.network_address.packed, network.netmask.packed)

    @property
    def empty(self):
        return not self.ip and not self.mask

    @property
    def prefixlen(self):
        return sum(bin(octet).count("1") for octet in self.mask)

    def __str__(self):
        if not self.ip:
            return ""
        return f"{ipaddress.ip_address(self.ip)}/{self.prefixlen}"


def _empty(network, /):
    return network is None or network.empty


class CIDR:
    """
    An IP address and the network implied by the IP and prefix length.

    The zero value, CIDR(), has neither address nor network and renders as "".
    """

    __slots__ = ("_address", "_network", "_raw")

    def __init__(self, address=None, network=None, raw=""):
        if address is not None and not isinstance(address, ipaddress.IPv4Address | ipaddress.IPv6Address):
            address = ipaddress.ip_address(address)
        if isinstance(network, ipaddress.IPv4Network | ipaddress.IPv6Network):
            network = Network.from_ipaddress(network)
        if network is not None and not isinstance(network, Network):
            raise TypeError("cidr 'network' must be a Network, an ip network or None")
        self._address = address
        self._network = network
        self._raw = raw

    @property
    def address(self):
        return self._address

    @property
    def network(self):
        return self._network

    @property
    def raw(self):
        return self._raw

    def __eq__(self, other):
        if not isinstance(other, CIDR):
            return NotImplemented
        mine = self._address.packed if self._address is not None else b""
        theirs = other._address.packed if other._address is not None else b""
        if mine != theirs:
            return False
        if _empty(self._network) or _empty(other._network):
            return _empty(self._network) and _empty(other._network)
        return self._network.ip == other._network.ip and self._network.mask == other._network.mask

    def __hash__(self):
        network = b"" if _empty(self._network) else self._network.ip + self._network.mask
        return hash((self._address.packed if self._address is not None else b"", network))

    def __str__(self):
        """
        IP/length form, e.g. "192.0.2.1/24"; "" for incomplete values.
        """
        if self._address is None or _empty(self._network):
            return ""
        return f"{self._address}/{self._network.prefixlen}"

    def full_string(self):
        """
        IP-network/length form, e.g. "192.0.2.1-192.0.2.0/24".
        """
        parts = []
        if self._address is not None:
            parts.append(str(self._address))
        if not _empty(self._network) and self._network.mask:
            parts.append(str(self._network))
        return "-".join(parts)

    def __repr__(self):
        return f"CIDR({str(self)!r})"

    def __rich__(self):
        return Text(str(self) or "(empty)", style="cyan" if str(self) else "dim")


def parse_cidr(text, /):
    """
    Parse CIDR notation into a CIDR value.

    Raises ValueError for anything ipaddress.ip_interface() rejects, and for
    inputs without an explicit prefix length.
    """
    text = text.strip()
    if "/" not in text or "%" in text:
        raise ValueError(f"{text!r} does not appear to be an IPv4 or IPv6 network")
    interface = ipaddress.ip_interface(text)
    return CIDR(interface.ip, interface.network, text)


__all__ = (
    "Network",
    "CIDR",
    "parse_cidr",
)
