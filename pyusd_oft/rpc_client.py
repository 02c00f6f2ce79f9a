"""Thin EVM client for the PYUSD OFT and its underlying ERC-20.

Each helper maps to one contract call or one signed transaction and returns
plain Python values. Transport and contract failures are translated into the
package's error types so the workflow modules never handle web3 exceptions
directly. No workflow logic lives here.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Tuple

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import ValidationError
from requests import RequestException
from web3 import Web3
from web3.contract import Contract
from web3.exceptions import ContractLogicError, MismatchedABI, TimeExhausted, Web3Exception

from .abi import ERC20_ABI, IOFT_ABI, TOKEN_SELECTOR
from .config import DEFAULT_RECEIPT_TIMEOUT, TransferConfig, chain_key_to_env
from .errors import ConfigurationError, RemoteReadFailure, TransactionError
from .model import ChainConfig

logger = logging.getLogger(__name__)

HTTP_TIMEOUT_SECONDS = 30
_TRANSPORT_ERRORS = (Web3Exception, RequestException, ValueError)


def _account_from_key(private_key: str) -> LocalAccount:
    try:
        return Account.from_key(private_key)
    except (ValueError, TypeError, ValidationError) as exc:
        raise ConfigurationError("PYUSD_PRIVATE_KEY is not a valid private key") from exc


def address_from_private_key(private_key: str) -> str:
    """Return the checksummed address controlled by ``private_key``."""

    return _account_from_key(private_key).address


class OFTChainClient:
    """Read and write access to one chain's OFT deployment.

    ``web3`` may be injected for tests or custom providers; otherwise an HTTP
    provider is built from the chain's RPC URL. A private key is only needed
    for approvals and sends.
    """

    def __init__(
        self,
        chain: ChainConfig,
        *,
        private_key: str | None = None,
        web3: Web3 | None = None,
        receipt_timeout: int = DEFAULT_RECEIPT_TIMEOUT,
    ) -> None:
        self.chain = chain
        self.receipt_timeout = receipt_timeout
        self.w3 = web3 or Web3(
            Web3.HTTPProvider(chain.rpc_url, request_kwargs={"timeout": HTTP_TIMEOUT_SECONDS})
        )
        self._account: LocalAccount | None = None
        if private_key:
            self._account = _account_from_key(private_key)

    @classmethod
    def from_config(cls, chain: ChainConfig, config: TransferConfig) -> "OFTChainClient":
        return cls(
            chain,
            private_key=config.private_key,
            receipt_timeout=config.receipt_timeout,
        )

    @property
    def has_signer(self) -> bool:
        return self._account is not None

    @property
    def account_address(self) -> str:
        return self._require_account().address

    def _require_account(self) -> LocalAccount:
        if self._account is None:
            raise ConfigurationError(
                "PYUSD_PRIVATE_KEY (or private_key in the config file) is required for this command"
            )
        return self._account

    def _oft(self, address: str) -> Contract:
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=IOFT_ABI)

    def _erc20(self, address: str) -> Contract:
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=ERC20_ABI)

    def _read(self, description: str, build_call: Callable[[], Any]) -> Any:
        logger.debug("eth_call %s on %s", description, self.chain.key)
        try:
            return build_call().call()
        except ContractLogicError as exc:
            raise RemoteReadFailure(f"{description} reverted on {self.chain.name}: {exc}") from exc
        except MismatchedABI as exc:
            raise RemoteReadFailure(
                f"{description} arguments do not match the contract ABI: {exc}"
            ) from exc
        except _TRANSPORT_ERRORS as exc:
            logger.error(
                "%s failed on %s: %s",
                description,
                self.chain.key,
                exc,
                exc_info=logger.isEnabledFor(logging.DEBUG),
            )
            raise RemoteReadFailure(
                f"{description} failed on {self.chain.name}. Check the RPC endpoint "
                f"({self.chain.rpc_url}) or set {chain_key_to_env(self.chain.key)}."
            ) from exc

    # Reads -----------------------------------------------------------------

    def supports_token_accessor(self, oft_address: str) -> bool:
        """Return whether ``oft_address`` answers ``token()`` with an address."""

        logger.debug("Checking token() accessor on %s", oft_address)
        try:
            result = self.w3.eth.call(
                {"to": Web3.to_checksum_address(oft_address), "data": Web3.to_hex(TOKEN_SELECTOR)}
            )
        except ContractLogicError:
            return False
        except _TRANSPORT_ERRORS as exc:
            raise RemoteReadFailure(
                f"token() accessor check failed on {self.chain.name}: {exc}"
            ) from exc
        data = bytes(result)
        return len(data) >= 32 and not any(data[:12])

    def token(self, oft_address: str) -> str:
        return self._read("token()", lambda: self._oft(oft_address).functions.token())

    def approval_required(self, oft_address: str) -> bool:
        return bool(
            self._read(
                "approvalRequired()",
                lambda: self._oft(oft_address).functions.approvalRequired(),
            )
        )

    def quote_send(
        self, oft_address: str, send_param: Tuple[Any, ...], pay_in_alt_token: bool = False
    ) -> Tuple[int, int]:
        native_fee, alt_fee = self._read(
            "quoteSend()",
            lambda: self._oft(oft_address).functions.quoteSend(send_param, pay_in_alt_token),
        )
        return int(native_fee), int(alt_fee)

    def quote_oft(self, oft_address: str, send_param: Tuple[Any, ...]) -> Tuple[Any, Any, Any]:
        limit, fee_details, receipt = self._read(
            "quoteOFT()", lambda: self._oft(oft_address).functions.quoteOFT(send_param)
        )
        return limit, fee_details, receipt

    def balance_of(self, token_address: str, account: str) -> int:
        return int(
            self._read(
                "balanceOf()",
                lambda: self._erc20(token_address).functions.balanceOf(
                    Web3.to_checksum_address(account)
                ),
            )
        )

    def allowance(self, token_address: str, owner: str, spender: str) -> int:
        return int(
            self._read(
                "allowance()",
                lambda: self._erc20(token_address).functions.allowance(
                    Web3.to_checksum_address(owner), Web3.to_checksum_address(spender)
                ),
            )
        )

    # Writes ----------------------------------------------------------------

    def _transact(
        self, description: str, build_call: Callable[[], Any], *, value: int | None = None
    ) -> str:
        account = self._require_account()
        params: dict[str, Any] = {"from": account.address, "chainId": self.chain.chain_id}
        if value is not None:
            params["value"] = value
        try:
            params["nonce"] = self.w3.eth.get_transaction_count(account.address, "pending")
            tx = build_call().build_transaction(params)
            signed = account.sign_transaction(tx)
            tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except _TRANSPORT_ERRORS as exc:
            logger.error(
                "%s submission failed on %s: %s",
                description,
                self.chain.key,
                exc,
                exc_info=logger.isEnabledFor(logging.DEBUG),
            )
            raise TransactionError(f"{description} submission failed: {exc}") from exc
        hex_hash = Web3.to_hex(tx_hash)
        logger.info("Submitted %s on %s: %s", description, self.chain.key, hex_hash)
        return hex_hash

    def approve(self, token_address: str, spender: str, amount: int) -> str:
        return self._transact(
            "approve()",
            lambda: self._erc20(token_address).functions.approve(
                Web3.to_checksum_address(spender), amount
            ),
        )

    def send(
        self,
        oft_address: str,
        send_param: Tuple[Any, ...],
        fee: Tuple[int, int],
        refund_address: str,
    ) -> str:
        return self._transact(
            "send()",
            lambda: self._oft(oft_address).functions.send(
                send_param, fee, Web3.to_checksum_address(refund_address)
            ),
            value=fee[0],
        )

    def wait_for_receipt(self, tx_hash: str) -> Mapping[str, Any]:
        """Block until ``tx_hash`` is mined; raise if it timed out or reverted."""

        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.receipt_timeout
            )
        except TimeExhausted as exc:
            raise TransactionError(
                f"Transaction {tx_hash} was not confirmed within {self.receipt_timeout}s",
                tx_hash=tx_hash,
            ) from exc
        except _TRANSPORT_ERRORS as exc:
            raise TransactionError(
                f"Failed to fetch receipt for {tx_hash}: {exc}", tx_hash=tx_hash
            ) from exc

        if receipt.get("status") == 0:
            raise TransactionError(
                f"Transaction {tx_hash} reverted (gasUsed={receipt.get('gasUsed')})",
                tx_hash=tx_hash,
            )
        logger.info(
            "Transaction %s confirmed in block %s", tx_hash, receipt.get("blockNumber")
        )
        return receipt
