"""Exception hierarchy for conversion faults"""


class BlockmdError(Exception):
    """Base class for all blockmd errors."""


class MalformedBlock(BlockmdError):
    """A block's props could not be read; the block contributes nothing."""

    def __init__(self, block_id: str, flavour: str, reason: str):
        super().__init__(f"Malformed {flavour} block {block_id!r}: {reason}")
        self.block_id = block_id
        self.flavour = flavour


class AssetError(BlockmdError):
    """An asset reference could not be read."""


class SnapshotError(BlockmdError):
    """A snapshot file is not valid JSON or not a block tree."""


class SerializeError(BlockmdError):
    """The serializer met a Markdown-AST node it cannot render."""


class WalkError(BlockmdError):
    """The traversal context was used out of order."""
