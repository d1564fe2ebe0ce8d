"""Minimal BCS (Binary Canonical Serialization) writer.

Covers only the primitives needed to encode Sui transaction kinds:
fixed-width little-endian integers, ULEB128 lengths, byte vectors,
strings and 32-byte addresses.
"""


class BcsWriter:
    def __init__(self) -> None:
        self._buf = bytearray()

    def u8(self, value: int) -> "BcsWriter":
        self._buf += value.to_bytes(1, "little")
        return self

    def u16(self, value: int) -> "BcsWriter":
        self._buf += value.to_bytes(2, "little")
        return self

    def u64(self, value: int) -> "BcsWriter":
        self._buf += value.to_bytes(8, "little")
        return self

    def boolean(self, value: bool) -> "BcsWriter":
        return self.u8(1 if value else 0)

    def uleb128(self, value: int) -> "BcsWriter":
        if value < 0:
            raise ValueError("ULEB128 cannot encode negative values")
        while True:
            byte = value & 0x7F
            value >>= 7
            if value:
                self._buf.append(byte | 0x80)
            else:
                self._buf.append(byte)
                return self

    def raw(self, data: bytes) -> "BcsWriter":
        self._buf += data
        return self

    def vector_u8(self, data: bytes) -> "BcsWriter":
        """Write a ``vector<u8>``: length prefix followed by the bytes."""
        return self.uleb128(len(data)).raw(data)

    def string(self, value: str) -> "BcsWriter":
        return self.vector_u8(value.encode("utf-8"))

    def address(self, value: str) -> "BcsWriter":
        return self.raw(address_bytes(value))

    def to_bytes(self) -> bytes:
        return bytes(self._buf)


def normalize_address(address: str) -> str:
    """Return the canonical ``0x`` + 64 lowercase hex form of a Sui address."""
    body = address.strip().lower()
    if body.startswith("0x"):
        body = body[2:]
    return "0x" + body.zfill(64)


def address_bytes(address: str) -> bytes:
    body = normalize_address(address)[2:]
    if len(body) != 64:
        raise ValueError(f"Address is longer than 32 bytes: {address}")
    try:
        return bytes.fromhex(body)
    except ValueError as exc:
        raise ValueError(f"Address is not hex: {address}") from exc
