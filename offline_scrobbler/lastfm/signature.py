import hashlib
from collections.abc import Mapping

SIGNING_SKIP = frozenset({"api_sig", "format", "callback"})


def compute_signature(params: Mapping[str, str], shared_secret: str) -> str:
    """Compute the Last.fm ``api_sig`` for a request.

    Parameter names are sorted by code point, each name is followed directly
    by its value, the shared secret is appended and the UTF-8 bytes are MD5
    hashed. ``api_sig``, ``format`` and ``callback`` never take part.
    """
    items = sorted((k, v) for k, v in params.items() if k not in SIGNING_SKIP)
    sig_str = "".join(k + v for k, v in items) + shared_secret
    return hashlib.md5(sig_str.encode("utf-8")).hexdigest()


def sign(params: Mapping[str, str], shared_secret: str) -> dict[str, str]:
    """Return a copy of ``params`` with a freshly computed ``api_sig``."""
    signed = dict(params)
    signed["api_sig"] = compute_signature(signed, shared_secret)
    return signed
