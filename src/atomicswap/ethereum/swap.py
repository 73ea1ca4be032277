"""ERC20 swap contract client.

Drives the swap contract's external API. Swap state lives in the contract
and is only observed here:

    NONE -> FUNDED -> WITHDRAWN | REFUNDED

Every mutating call follows the same order: refresh gas price, estimate
gas for the exact call, build/sign/send, report the hash, wait for the
receipt. Hash validity, timelocks and preimages are enforced by the
contract, not by this client.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from web3 import Web3
from web3.exceptions import Web3Exception

from atomicswap.accounts.ethereum import EthereumAccount
from atomicswap.errors import GasEstimationError, RetryExhaustedError, TransactionReverted
from atomicswap.ethereum.abi import ERC20_ABI, SWAP_ABI, output_index
from atomicswap.ethereum.secret import SecretExtractor
from atomicswap.units import Number, to_base_units, to_prefixed_hex
from atomicswap.utils.polling import DEFAULT_DELAY, UNBOUNDED, Bounded, repeat_until_result

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 200_000
DEFAULT_GAS_PRICE = 2_000_000_000
GAS_PRICE_MARGIN = 1_300_000_000
FALLBACK_GAS_PRICE = 15_000_000_000

TransactionHashObserver = Callable[[str], Any]


@dataclass(frozen=True)
class PendingTransaction:
    """A sent contract call whose receipt has not been awaited yet."""

    hash: str


class ContractSwapClient:
    """Swap lifecycle operations on the ERC20 swap contract."""

    def __init__(
        self,
        w3: Any,
        account: EthereumAccount,
        address: str,
        token_address: str,
        decimals: int,
        abi: Optional[list] = None,
        token_abi: Optional[list] = None,
        gas_limit: int = DEFAULT_GAS_LIMIT,
        gas_price: int = DEFAULT_GAS_PRICE,
        gas_price_margin: int = GAS_PRICE_MARGIN,
        fallback_gas_price: int = FALLBACK_GAS_PRICE,
        poll_delay: float = DEFAULT_DELAY,
        poll_retries: int = 9,
        confirmation_timeout: float = 120,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        """Initialize client.

        Args:
            w3: AsyncWeb3 instance
            account: Account that signs every call
            address: Swap contract address
            token_address: ERC20 token locked in swaps
            decimals: Token decimals
            abi: Swap contract ABI (defaults to SWAP_ABI)
            token_abi: Token ABI (defaults to ERC20_ABI)
        """
        if not isinstance(address, str) or not address:
            raise ValueError('ContractSwapClient: "address" required')
        if not isinstance(token_address, str) or not token_address:
            raise ValueError('ContractSwapClient: "token_address" required')
        if not isinstance(decimals, int):
            raise ValueError('ContractSwapClient: "decimals" required')

        self.w3 = w3
        self.account = account
        self.address = Web3.to_checksum_address(address)
        self.token_address = Web3.to_checksum_address(token_address)
        self.decimals = decimals
        self.abi = abi or SWAP_ABI
        self.token_abi = token_abi or ERC20_ABI

        self.gas_limit = gas_limit
        self.gas_price = gas_price
        self.gas_price_margin = gas_price_margin
        self.fallback_gas_price = fallback_gas_price

        self.poll_delay = poll_delay
        self.poll_retries = poll_retries
        self.confirmation_timeout = confirmation_timeout
        self.sleep = sleep

        self.contract = w3.eth.contract(address=self.address, abi=self.abi)
        self.token = w3.eth.contract(address=self.token_address, abi=self.token_abi)
        self.secrets = SecretExtractor(
            w3, abi=self.abi, retries=poll_retries, delay=poll_delay, sleep=sleep
        )
        self._balance_index = output_index(self.abi, "swaps", "balance")

    # ======================
    # Submission
    # ======================

    async def update_gas_price(self) -> int:
        """Network gas price plus margin, or the fallback price."""
        try:
            network_price = await self.w3.eth.gas_price
            self.gas_price = int(network_price) + self.gas_price_margin
        except Exception as e:
            logger.warning(
                f"Gas price query failed ({type(e).__name__}: {e}), using {self.fallback_gas_price}"
            )
            self.gas_price = self.fallback_gas_price

        return self.gas_price

    async def submit(
        self,
        call: Any,
        on_transaction_hash: Optional[TransactionHashObserver] = None,
    ) -> PendingTransaction:
        """Sign and send a contract call.

        The observer is invoked exactly once with the hash, before the
        receipt is awaited.

        Raises:
            GasEstimationError: If the node rejects the call during estimation
        """
        await self.update_gas_price()

        params = {
            "from": self.account.address,
            "gas": self.gas_limit,
            "gasPrice": self.gas_price,
        }

        try:
            gas = await call.estimate_gas(params)
        except (Web3Exception, ValueError) as e:
            logger.error(f"Gas estimation failed: {e}")
            raise GasEstimationError(str(e)) from e

        logger.debug(f"Estimated gas: {gas}")
        nonce = await self.w3.eth.get_transaction_count(self.account.address, "pending")

        transaction = await call.build_transaction({**params, "gas": gas, "nonce": nonce})
        signed = self.account.sign_transaction(transaction)
        tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)

        pending = PendingTransaction(hash=to_prefixed_hex(bytes(tx_hash)))
        logger.info(f"Contract call sent: {pending.hash}")

        if on_transaction_hash is not None:
            on_transaction_hash(pending.hash)

        return pending

    async def await_confirmation(self, pending: PendingTransaction) -> Any:
        """Wait for the receipt of a sent call.

        Raises:
            TransactionReverted: If the call was mined with status 0
        """
        receipt = await self.w3.eth.wait_for_transaction_receipt(
            pending.hash, timeout=self.confirmation_timeout
        )

        if receipt["status"] == 0:
            logger.error(f"Transaction {pending.hash} reverted")
            raise TransactionReverted(pending.hash, receipt)

        logger.debug(f"Receipt for {pending.hash}: block {receipt.get('blockNumber')}")
        return receipt

    async def _send(self, call: Any, on_transaction_hash: Optional[TransactionHashObserver]) -> Any:
        pending = await self.submit(call, on_transaction_hash)
        return await self.await_confirmation(pending)

    def _read_params(self) -> dict:
        return {"from": self.account.address}

    # ======================
    # Token funding
    # ======================

    async def approve(
        self, amount: Number, on_transaction_hash: Optional[TransactionHashObserver] = None
    ) -> Any:
        """Allow the swap contract to move ``amount`` tokens."""
        value = to_base_units(amount, self.decimals)
        call = self.token.functions.approve(self.address, value)
        return await self._send(call, on_transaction_hash)

    async def check_allowance(self, spender: str) -> int:
        """Tokens ``spender`` has approved for the swap contract."""
        return await self.token.functions.allowance(spender, self.address).call(self._read_params())

    # ======================
    # Lifecycle
    # ======================

    async def create(
        self,
        secret_hash: str,
        participant_address: str,
        amount: Number,
        target_wallet: Optional[str] = None,
        on_transaction_hash: Optional[TransactionHashObserver] = None,
    ) -> Any:
        """Create a swap, with a target wallet if one differs from the participant."""
        if target_wallet and target_wallet.lower() != participant_address.lower():
            return await self.create_swap_target(
                secret_hash, participant_address, target_wallet, amount, on_transaction_hash
            )
        return await self.create_swap(secret_hash, participant_address, amount, on_transaction_hash)

    async def create_swap(
        self,
        secret_hash: str,
        participant_address: str,
        amount: Number,
        on_transaction_hash: Optional[TransactionHashObserver] = None,
    ) -> Any:
        values = [
            to_prefixed_hex(secret_hash),
            participant_address,
            to_base_units(amount, self.decimals),
            self.token_address,
        ]
        call = self.contract.functions.createSwap(*values)
        return await self._send(call, on_transaction_hash)

    async def create_swap_target(
        self,
        secret_hash: str,
        participant_address: str,
        target_wallet: str,
        amount: Number,
        on_transaction_hash: Optional[TransactionHashObserver] = None,
    ) -> Any:
        values = [
            to_prefixed_hex(secret_hash),
            participant_address,
            target_wallet,
            to_base_units(amount, self.decimals),
            self.token_address,
        ]
        call = self.contract.functions.createSwapTarget(*values)
        return await self._send(call, on_transaction_hash)

    async def withdraw(
        self,
        secret: str,
        owner_address: str,
        on_transaction_hash: Optional[TransactionHashObserver] = None,
    ) -> Any:
        """Reveal the secret and take the owner's locked tokens."""
        call = self.contract.functions.withdraw(to_prefixed_hex(secret), owner_address)
        return await self._send(call, on_transaction_hash)

    async def refund(
        self,
        participant_address: str,
        on_transaction_hash: Optional[TransactionHashObserver] = None,
    ) -> Any:
        """Take back locked tokens after the contract's timeout."""
        call = self.contract.functions.refund(participant_address)
        return await self._send(call, on_transaction_hash)

    # ======================
    # Reads
    # ======================

    async def check_swap_exists(self, owner_address: str, participant_address: str) -> bool:
        logger.debug(f"swaps[{owner_address}, {participant_address}]")
        swap = await self.contract.functions.swaps(owner_address, participant_address).call()
        logger.debug(f"swapExists {swap}")

        if not swap:
            return False

        if isinstance(swap, dict):
            balance = swap.get("balance") or 0
        else:
            balance = swap[self._balance_index]

        return int(balance) > 0

    async def get_balance(self, owner_address: str) -> int:
        balance = await self.contract.functions.getBalance(owner_address).call(self._read_params())
        logger.debug(f"balance {balance}")
        return balance

    async def check_balance(self, owner_address: str, expected_value: int) -> Optional[str]:
        """Wait for the owner's locked balance and compare it.

        Returns:
            Mismatch message if the balance is below ``expected_value``, else None
        """
        try:
            balance = await repeat_until_result(
                Bounded(self.poll_retries),
                lambda: self.get_balance(owner_address),
                delay=self.poll_delay,
                sleep=self.sleep,
            )
        except RetryExhaustedError as e:
            balance = e.last_result or 0

        if expected_value > balance:
            return f"Expected value: {expected_value}, got: {balance}"
        return None

    async def fetch_target_wallet(self, owner_address: str) -> str:
        target_wallet = await self.contract.functions.getTargetWallet(owner_address).call(
            self._read_params()
        )
        logger.debug(f"getTargetWallet {target_wallet}")
        return target_wallet

    async def get_target_wallet(self, owner_address: str) -> str:
        """Poll until the contract reports a target wallet.

        Never gives up; callers that need a deadline should wrap this in
        ``asyncio.wait_for``.
        """
        return await repeat_until_result(
            UNBOUNDED,
            lambda: self.fetch_target_wallet(owner_address),
            delay=self.poll_delay,
            sleep=self.sleep,
        )

    async def get_secret(self, participant_address: str) -> Optional[str]:
        """Revealed secret, or None while it is still all zeros."""
        secret = await self.contract.functions.getSecret(participant_address).call(self._read_params())

        if not secret:
            return None

        secret_hex = to_prefixed_hex(secret)
        if int(secret_hex, 16) == 0:
            return None
        return secret_hex

    async def get_secret_from_tx_hash(self, tx_hash: str) -> str:
        return await self.secrets.get_secret_from_tx_hash(tx_hash)
