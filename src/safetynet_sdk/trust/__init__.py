"""
Trust anchor management for certificate chain validation
"""

from .store import (
    TrustAnchors,
    TrustStoreHandle,
    get_default_trust_store,
    set_default_trust_anchors,
)

__all__ = [
    'TrustAnchors',
    'TrustStoreHandle',
    'get_default_trust_store',
    'set_default_trust_anchors',
]
