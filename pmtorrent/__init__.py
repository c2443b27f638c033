"""
pmtorrent core library.

Splits files into fixed-size chunks, builds a Merkle tree over the chunk
hashes and produces inclusion proofs so a client can verify individual
chunks against a published root hash.
"""

__version__ = "0.1.0"
