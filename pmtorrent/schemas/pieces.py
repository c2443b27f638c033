"""
Wire schemas for file listings and pieces.

Digests travel as lowercase hex, chunk bytes as base64.
"""

import base64

from pydantic import BaseModel, ConfigDict, Field

from pmtorrent.crypto.hashing import decode_hex, encode_hex
from pmtorrent.files.chunk import Chunk
from pmtorrent.merkle.indexing import OddNodePolicy, Side
from pmtorrent.merkle.merkle_tree import Proof, ProofStep


class FileDescription(BaseModel):
    """One entry of the served file listing."""

    hash: str = Field(..., description="Hex Merkle root of the file; also its id")
    pieces: int = Field(..., ge=0, description="Number of chunks")
    leaf_count: int = Field(..., ge=1, description="Number of tree leaves (incl. filler)")
    chunk_size: int = Field(..., ge=1, description="Chunk size the leaves were hashed with")
    policy: OddNodePolicy = Field(
        default=OddNodePolicy.DUPLICATE, description="Odd-node policy of the tree"
    )


class ProofStepModel(BaseModel):
    """Serialized proof step."""

    model_config = ConfigDict(frozen=True)

    hash: str = Field(..., description="Hex digest of the sibling node")
    side: Side = Field(..., description="Side of the sibling")

    @classmethod
    def from_step(cls, step: ProofStep) -> "ProofStepModel":
        return cls(hash=encode_hex(step.digest), side=step.side)

    def to_step(self) -> ProofStep:
        return ProofStep(decode_hex(self.hash), self.side)


class Piece(BaseModel):
    """A chunk of a file together with its inclusion proof."""

    hash: str = Field(..., description="Hex Merkle root of the file")
    index: int = Field(..., ge=0, description="Chunk index (equals its leaf index)")
    leaf_count: int = Field(..., ge=1)
    content: str = Field(..., description="Base64 chunk bytes")
    proof: list[ProofStepModel] = Field(default_factory=list)

    @classmethod
    def from_chunk(cls, hash_id: str, leaf_count: int, chunk: Chunk, proof: Proof) -> "Piece":
        return cls(
            hash=hash_id,
            index=chunk.leaf_idx,
            leaf_count=leaf_count,
            content=base64.b64encode(chunk.data).decode("ascii"),
            proof=[ProofStepModel.from_step(step) for step in proof],
        )

    def chunk_bytes(self) -> bytes:
        return base64.b64decode(self.content, validate=True)

    def proof_steps(self) -> Proof:
        return [step.to_step() for step in self.proof]
