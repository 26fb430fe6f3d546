# digicard/google/__init__.py
"""
Digicard Google Module - Generic-object wallet

Projects student records into generic wallet objects, keeps the remote object
store in sync and signs save-to-wallet links.
"""

from digicard.google.card import GoogleCard
from digicard.google.client import LookupStatus, ObjectLookup, WalletObjectsClient
from digicard.google.objects import build_generic_object
from digicard.google.signer import SaveLinkSigner

__all__ = [
    "GoogleCard",
    "WalletObjectsClient",
    "ObjectLookup",
    "LookupStatus",
    "SaveLinkSigner",
    "build_generic_object",
]
