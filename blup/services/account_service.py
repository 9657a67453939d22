"""
Account management.

An account is a name registered in the local state plus a key pair stored in
the secret vault as ``<name>.nsec`` and ``<name>.npub``. One account is active
at a time; a per-invocation override takes precedence over it.
"""

from dataclasses import dataclass

import structlog

from blup.config import BlupConfig
from blup.core.state import StateStore
from blup.crypto.keys import KeyPair, decode_npub, decode_nsec
from blup.crypto.secp256k1_backend import Secp256k1Signer
from blup.exceptions import (
    AccountExistsError,
    AccountNotFoundError,
    AuthError,
    ConfigurationError,
    InvalidInput,
    NoAccountError,
)
from blup.models.state import LEGACY_ACCOUNT
from blup.services.vault import SecretVault

logger = structlog.get_logger(__name__)

NSEC_KEY = "nsec"
NPUB_KEY = "npub"
DEFAULT_ACCOUNT = "default"


@dataclass(frozen=True, kw_only=True)
class AccountInfo:
    name: str
    npub: str | None
    active: bool


class AccountService:
    """
    Resolves the active account and manages account credentials.

    Args:
        store: Local state file.
        vault: Secret storage.
        config: Client configuration.
        override: Account to use for this invocation regardless of the stored selection.
    """

    def __init__(
        self,
        store: StateStore,
        vault: SecretVault,
        config: BlupConfig,
        *,
        override: str | None = None,
    ) -> None:
        self._store = store
        self._vault = vault
        self._config = config
        self._override = override or None

    def active_account(self) -> str:
        """
        Name of the account to act as, or ``""`` when there is none.

        Keys stored by the single-account layout (bare ``nsec``/``npub``
        entries) are copied to the ``default`` account on first use.
        """
        if self._override:
            return self._override

        state = self._store.load()
        if state.active_account:
            return state.active_account
        if state.accounts:
            return state.accounts[0]

        legacy_nsec = self._vault.get("", NSEC_KEY)
        legacy_npub = self._vault.get("", NPUB_KEY) if legacy_nsec else None
        if legacy_nsec and legacy_npub:
            self._vault.set(LEGACY_ACCOUNT, NSEC_KEY, legacy_nsec)
            self._vault.set(LEGACY_ACCOUNT, NPUB_KEY, legacy_npub)
            self._store.save(state.with_account(LEGACY_ACCOUNT).with_active(LEGACY_ACCOUNT))
            logger.info("Migrated existing keys to account", account=LEGACY_ACCOUNT)
            return LEGACY_ACCOUNT

        return ""

    def require_account(self) -> str:
        """
        Raises:
            NoAccountError: If no account can be resolved.
        """
        if not (account := self.active_account()):
            raise NoAccountError()
        return account

    def create(self, name: str = DEFAULT_ACCOUNT) -> KeyPair:
        """
        Generate and store a new key pair.

        The account becomes active when none is, and its server list is
        seeded with the default server.

        Raises:
            AccountExistsError: If ``name`` is already registered.
        """
        state = self._store.load()
        if name in state.accounts:
            msg = f"Account '{name}' already exists."
            raise AccountExistsError(msg, account=name)

        keypair = KeyPair.generate()
        self._store_keys(name, keypair)

        state = state.with_account(name)
        if not state.servers_for(name):
            state = state.with_servers(name, (self._config.default_server,))
        self._store.save(state)

        logger.info("Account created", account=name, npub=keypair.npub)
        return keypair

    def import_keys(self, name: str, npub: str, nsec: str) -> KeyPair:
        """
        Store existing credentials under ``name``.

        Raises:
            InvalidInput: If either encoding is invalid or the keys do not belong together.
        """
        try:
            public_key = decode_npub(npub)
        except ValueError as e:
            msg = f"Not a valid npub: {e}"
            raise InvalidInput(msg) from e
        try:
            keypair = KeyPair.from_secret(decode_nsec(nsec))
        except (ValueError, AuthError) as e:
            msg = f"Not a valid nsec: {e}"
            raise InvalidInput(msg) from e
        if keypair.public_key != public_key:
            msg = "The npub does not match the nsec"
            raise InvalidInput(msg, account=name)

        self._store_keys(name, keypair)
        self._store.save(self._store.load().with_account(name))
        logger.info("Account imported", account=name)
        return keypair

    def list_accounts(self) -> list[AccountInfo]:
        state = self._store.load()
        return [
            AccountInfo(
                name=account,
                npub=self._vault.get(account, NPUB_KEY),
                active=account == state.active_account,
            )
            for account in state.accounts
        ]

    def use(self, name: str) -> None:
        """
        Make ``name`` the active account.

        Raises:
            AccountNotFoundError: If ``name`` is not registered.
        """
        state = self._store.load()
        if name not in state.accounts:
            msg = f"Account '{name}' not found."
            raise AccountNotFoundError(msg, account=name)
        self._store.save(state.with_active(name))

    def keypair(self) -> KeyPair:
        """
        Key pair of the active account.

        Raises:
            NoAccountError: If no account can be resolved.
            ConfigurationError: If the account has no stored secret key.
            AuthError: If the stored secret key cannot be decoded.
        """
        account = self.require_account()
        nsec = self._vault.get(account, NSEC_KEY)
        if not nsec:
            msg = f"No nsec found for account '{account}'."
            raise ConfigurationError(msg, account=account)
        try:
            secret_key = decode_nsec(nsec)
        except ValueError as e:
            msg = "Stored nsec is invalid"
            raise AuthError(msg, account=account) from e
        return KeyPair.from_secret(secret_key)

    def signer(self) -> Secp256k1Signer:
        return self.keypair().signer()

    def public_key(self) -> str:
        """
        Hex public key of the active account, read from the stored npub.

        Raises:
            NoAccountError: If no account can be resolved.
            ConfigurationError: If the account has no stored npub.
            AuthError: If the stored npub cannot be decoded.
        """
        account = self.require_account()
        npub = self._vault.get(account, NPUB_KEY)
        if not npub:
            msg = f"No npub found for account '{account}'."
            raise ConfigurationError(msg, account=account)
        try:
            return decode_npub(npub)
        except ValueError as e:
            msg = "Stored npub is invalid"
            raise AuthError(msg, account=account) from e

    def _store_keys(self, name: str, keypair: KeyPair) -> None:
        self._vault.set(name, NSEC_KEY, keypair.nsec)
        self._vault.set(name, NPUB_KEY, keypair.npub)
