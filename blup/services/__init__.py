"""
Business logic services for blup.
"""

from blup.services.account_service import AccountInfo, AccountService
from blup.services.blob_service import BlobService
from blup.services.mirror_service import MirrorService
from blup.services.profile_service import ProfileService
from blup.services.server_list import ServerListCache
from blup.services.token_factory import AuthTokenFactory
from blup.services.upload_service import UploadService
from blup.services.vault import KeyringVault, SecretVault

__all__ = [
    "AccountInfo",
    "AccountService",
    "AuthTokenFactory",
    "BlobService",
    "KeyringVault",
    "MirrorService",
    "ProfileService",
    "SecretVault",
    "ServerListCache",
    "UploadService",
]
