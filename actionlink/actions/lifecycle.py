"""
Execution Lifecycle Controller

Drives one action page's transaction through:

    idle -> submitting -> confirming -> confirmed
               |              |
               +-> failed     +-> failed (observed revert only)

Wallet and chain callbacks arrive as discrete events (submitted,
confirmed, rejected, reverted). Events that do not fit the current state
are ignored, so the two channels may deliver in either order or not at
all. Confirmed is only ever entered on an explicit confirmation for the
in-flight transaction hash, and failed is only entered from confirming on
an explicit revert for that hash. Losing sight of the chain while
confirming (timeout, RPC error) keeps the controller confirming.

At most one execution is in flight: trigger() is ignored while
submitting, confirming or confirmed. A failed attempt can be retried by
triggering again.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple
import logging

from actionlink.actions.links import explorer_tx_url
from actionlink.actions.transactions import build_transaction
from actionlink.core.config import ChainConfig
from actionlink.core.exceptions import (
    ActionLinkError,
    ChainRevertError,
    SubmissionRejectedError,
)
from actionlink.models.actions import ActionDefinition, TransactionDescriptor

logger = logging.getLogger(__name__)


class ExecutionStatus(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    CONFIRMING = "confirming"
    CONFIRMED = "confirmed"
    FAILED = "failed"


# Statuses in which a new trigger is ignored
BUSY_STATUSES = {
    ExecutionStatus.SUBMITTING,
    ExecutionStatus.CONFIRMING,
    ExecutionStatus.CONFIRMED,
}


@dataclass(frozen=True)
class ExecutionState:
    """Snapshot of the controller; replaced on every transition"""
    status: ExecutionStatus = ExecutionStatus.IDLE
    tx_hash: Optional[str] = None
    error_code: Optional[str] = None
    reason: Optional[str] = None


def failure_reason(error: Any) -> str:
    """Short human-readable cause: the first non-empty line of the error."""
    message = error.message if isinstance(error, ActionLinkError) else str(error)
    for line in message.splitlines():
        if line.strip():
            return line.strip()
    if isinstance(error, BaseException):
        return type(error).__name__
    return "Unknown error"


class SigningProvider(ABC):
    """Chain write interface: the user's wallet or a signing node"""

    @abstractmethod
    async def send_transaction(self, descriptor: TransactionDescriptor) -> str:
        """Submit a transaction and return its hash."""

    @abstractmethod
    async def wait_for_receipt(self, tx_hash: str) -> Dict[str, Any]:
        """Wait for the transaction receipt (must include status)."""


class ExecutionController:
    """
    State machine for executing one action.

    Args:
        action: The resolved action being executed
        config: Chain settings (decimals, explorer)
        builder: Transaction builder, defaults to build_transaction
        on_change: Called with the new state after every transition
    """

    def __init__(
        self,
        action: ActionDefinition,
        config: ChainConfig,
        builder: Callable[[ActionDefinition, str, ChainConfig], TransactionDescriptor] = build_transaction,
        on_change: Optional[Callable[[ExecutionState], None]] = None
    ):
        self.action = action
        self.config = config
        self.builder = builder
        self.on_change = on_change
        self.state = ExecutionState()
        self.descriptor: Optional[TransactionDescriptor] = None
        self._early_confirmation: Optional[str] = None
        self._early_revert: Optional[Tuple[str, Any]] = None

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def status(self) -> ExecutionStatus:
        return self.state.status

    @property
    def can_trigger(self) -> bool:
        """Whether the execute button should be enabled."""
        return self.state.status not in BUSY_STATUSES

    @property
    def status_message(self) -> str:
        status = self.state.status
        if status is ExecutionStatus.SUBMITTING:
            return "Waiting for wallet confirmation..."
        if status is ExecutionStatus.CONFIRMING:
            return "Confirming transaction..."
        if status is ExecutionStatus.CONFIRMED:
            return "Success! Action complete."
        if status is ExecutionStatus.FAILED:
            return f"Error: {self.state.reason}"
        return "Ready to proceed."

    @property
    def explorer_url(self) -> Optional[str]:
        if self.state.status is ExecutionStatus.CONFIRMED and self.state.tx_hash:
            return explorer_tx_url(self.config, self.state.tx_hash)
        return None

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def trigger(self, caller: Optional[str]) -> Optional[TransactionDescriptor]:
        """
        User pressed execute.

        Builds the transaction and moves to submitting. Ignored (returns
        None) when busy, when no wallet is connected, or when the
        transaction cannot be built.
        """
        if not self.can_trigger:
            logger.debug(f"Ignoring trigger while {self.state.status.value}")
            return None

        if not caller:
            logger.debug("Ignoring trigger without a connected caller")
            return None

        try:
            descriptor = self.builder(self.action, caller, self.config)
        except ActionLinkError as e:
            logger.warning(f"Cannot build transaction: {e.message}")
            return None

        self.descriptor = descriptor
        self._clear_early_events()
        self._transition(ExecutionState(status=ExecutionStatus.SUBMITTING))
        return descriptor

    def on_submitted(self, tx_hash: Optional[str]) -> None:
        """
        Wallet returned a transaction hash.

        A submission without a hash cannot be tracked and fails the attempt
        as rejected so the page can retry.
        """
        if self.state.status is not ExecutionStatus.SUBMITTING:
            logger.debug(f"Ignoring submitted({tx_hash}) while {self.state.status.value}")
            return

        if not tx_hash:
            self._fail(SubmissionRejectedError("Wallet returned no transaction hash"))
            return

        early_confirmation, early_revert = self._early_confirmation, self._early_revert
        self._clear_early_events()
        self._transition(ExecutionState(status=ExecutionStatus.CONFIRMING, tx_hash=tx_hash))

        if early_confirmation == tx_hash:
            self.on_confirmed(tx_hash)
        elif early_revert is not None and early_revert[0] == tx_hash:
            self.on_reverted(early_revert[1], tx_hash)

    def on_confirmed(self, tx_hash: str) -> None:
        """Chain reported the transaction as included."""
        status = self.state.status
        if status is ExecutionStatus.SUBMITTING and tx_hash:
            # Receipt observed before the wallet handed back the hash
            self._early_confirmation = tx_hash
            return

        if status is not ExecutionStatus.CONFIRMING or tx_hash != self.state.tx_hash:
            logger.debug(f"Ignoring confirmed({tx_hash}) while {status.value}")
            return

        self._transition(ExecutionState(status=ExecutionStatus.CONFIRMED, tx_hash=tx_hash))

    def on_rejected(self, error: Any) -> None:
        """Wallet or provider declined the submission."""
        if self.state.status is not ExecutionStatus.SUBMITTING:
            logger.debug(f"Ignoring rejection while {self.state.status.value}")
            return
        self._fail(SubmissionRejectedError(failure_reason(error)))

    def on_reverted(self, error: Any, tx_hash: Optional[str] = None) -> None:
        """
        Chain reported a transaction as failed.

        While submitting, a revert carrying a hash cannot be matched yet: it
        is held until the wallet hands back that hash, so a stale revert
        from an earlier attempt never fails the current one. A revert
        without a hash while submitting fails the attempt.
        """
        status = self.state.status

        if status is ExecutionStatus.SUBMITTING and tx_hash:
            self._early_revert = (tx_hash, error)
            return

        in_flight = status is ExecutionStatus.SUBMITTING or (
            status is ExecutionStatus.CONFIRMING
            and (tx_hash is None or tx_hash == self.state.tx_hash)
        )
        if not in_flight:
            logger.debug(f"Ignoring revert({tx_hash}) while {status.value}")
            return
        self._fail(ChainRevertError(failure_reason(error), tx_hash or self.state.tx_hash))

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    async def execute(self, caller: Optional[str], provider: SigningProvider) -> ExecutionState:
        """
        Run one attempt end to end against a signing provider.

        Returns the latest state. A send error fails the attempt as
        rejected and a receipt with status 0 fails it as reverted. If the
        receipt cannot be observed (timeout, RPC error) the controller
        stays confirming: the transaction may still be mined, and later
        on_confirmed / on_reverted events settle it.
        """
        descriptor = self.trigger(caller)
        if descriptor is None:
            return self.state

        try:
            tx_hash = await provider.send_transaction(descriptor)
        except Exception as e:
            self.on_rejected(e)
            return self.state

        self.on_submitted(tx_hash)
        if self.state.status is not ExecutionStatus.CONFIRMING:
            return self.state

        try:
            receipt = await provider.wait_for_receipt(tx_hash)
        except Exception as e:
            logger.warning(f"Receipt for {tx_hash} not observed, still confirming: {failure_reason(e)}")
            return self.state

        if receipt.get("status") == 0:
            self.on_reverted("Transaction reverted", tx_hash)
        else:
            self.on_confirmed(tx_hash)
        return self.state

    # ------------------------------------------------------------------

    def _clear_early_events(self) -> None:
        self._early_confirmation = None
        self._early_revert = None

    def _fail(self, error: ActionLinkError) -> None:
        self._clear_early_events()
        self._transition(ExecutionState(
            status=ExecutionStatus.FAILED,
            tx_hash=self.state.tx_hash,
            error_code=error.error_code,
            reason=error.message,
        ))

    def _transition(self, new_state: ExecutionState) -> None:
        logger.info(
            f"Execution {self.state.status.value} -> {new_state.status.value}"
            + (f" ({new_state.tx_hash})" if new_state.tx_hash else "")
        )
        self.state = new_state
        if self.on_change is not None:
            self.on_change(new_state)
