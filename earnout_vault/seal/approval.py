"""Construction of the on-ledger approval transaction for key-share requests.

Key servers dry-run this transaction; the policy's approval entry point
aborts unless the caller is allowed to decrypt the identity. Only the
transaction kind is built (no gas or sender), encoded as BCS.
"""

from earnout_vault.sui.bcs import BcsWriter

_TX_KIND_PROGRAMMABLE = 0
_CALL_ARG_PURE = 0
_CALL_ARG_OBJECT = 1
_OBJECT_ARG_SHARED = 1
_COMMAND_MOVE_CALL = 0
_ARGUMENT_INPUT = 1


def build_approval_transaction(
    *,
    package_id: str,
    module: str,
    function: str,
    identity: str,
    deal_id: str,
    deal_initial_shared_version: int,
) -> bytes:
    """Encode ``<package>::<module>::<function>(id: vector<u8>, deal: &Deal)``."""
    identity_bytes = bytes.fromhex(identity)
    pure_identity = BcsWriter().vector_u8(identity_bytes).to_bytes()

    writer = BcsWriter().u8(_TX_KIND_PROGRAMMABLE)

    # inputs
    writer.uleb128(2)
    writer.u8(_CALL_ARG_PURE).vector_u8(pure_identity)
    writer.u8(_CALL_ARG_OBJECT).u8(_OBJECT_ARG_SHARED)
    writer.address(deal_id).u64(deal_initial_shared_version).boolean(False)

    # commands
    writer.uleb128(1)
    writer.u8(_COMMAND_MOVE_CALL)
    writer.address(package_id).string(module).string(function)
    writer.uleb128(0)  # type arguments
    writer.uleb128(2)
    writer.u8(_ARGUMENT_INPUT).u16(0)
    writer.u8(_ARGUMENT_INPUT).u16(1)
    return writer.to_bytes()
